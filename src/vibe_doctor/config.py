"""Configuration from environment variables: API root, token, scoring thresholds."""

from __future__ import annotations

import os
from typing import Optional

from .core.clients.github import API_BASE as DEFAULT_API_BASE
from .core.scoring import DEFAULT_PROFILE, ScoringProfile

_DISABLED_VALUES = {"", "off", "none", "disabled"}


def get_api_base() -> str:
    """GitHub API root. Override with GITHUB_API_BASE for GitHub Enterprise."""
    return os.environ.get("GITHUB_API_BASE", DEFAULT_API_BASE).rstrip("/")


def get_github_token() -> Optional[str]:
    """Default access token from GITHUB_TOKEN, or None when unset."""
    token = os.environ.get("GITHUB_TOKEN", "").strip()
    return token or None


def get_log_level() -> str:
    return os.environ.get("LOG_LEVEL", "INFO").upper()


def _read_threshold(name: str, default: Optional[int]) -> Optional[int]:
    """Read an optional integer threshold; 'off'/'none'/empty disables the rule."""
    if name not in os.environ:
        return default
    raw = os.environ[name].strip()
    if raw.lower() in _DISABLED_VALUES:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer or 'off', got {raw!r}") from None


def load_scoring_profile() -> ScoringProfile:
    """Build the scoring profile, applying VIBE_* overrides to the defaults.

    VIBE_BLOAT_THRESHOLD   files above which the repo counts as bloated (default 1000)
    VIBE_SPARSE_THRESHOLD  files below which the repo counts as sparse (default 5)
    VIBE_TOP_FILES         how many of the largest files to report (default 5)
    """
    overrides: dict = {}
    if "VIBE_BLOAT_THRESHOLD" in os.environ:
        overrides["bloat_threshold"] = _read_threshold("VIBE_BLOAT_THRESHOLD", DEFAULT_PROFILE.bloat_threshold)
    if "VIBE_SPARSE_THRESHOLD" in os.environ:
        overrides["sparse_threshold"] = _read_threshold("VIBE_SPARSE_THRESHOLD", DEFAULT_PROFILE.sparse_threshold)
    if "VIBE_TOP_FILES" in os.environ:
        top = _read_threshold("VIBE_TOP_FILES", DEFAULT_PROFILE.top_files)
        if top is None:
            raise ValueError("VIBE_TOP_FILES cannot be disabled")
        overrides["top_files"] = top
    if not overrides:
        return DEFAULT_PROFILE
    return ScoringProfile(**{**DEFAULT_PROFILE.model_dump(), **overrides})
