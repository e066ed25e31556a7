"""Shared test fixtures for Vibe Doctor tests."""

from __future__ import annotations

from typing import Callable, Optional

import httpx
import pytest

from vibe_doctor.core.models import FileEntry


def entries(*paths: str, size: int = 100) -> list[FileEntry]:
    """Blob entries for the given paths, all the same size."""
    return [FileEntry(path=p, size=size) for p in paths]


def filler(count: int, prefix: str = "src/file") -> list[FileEntry]:
    """Neutral blobs that trigger no path-based rule."""
    return [FileEntry(path=f"{prefix}{i}.js", size=10) for i in range(count)]


def github_handler(
    repo_status: int = 200,
    repo_body: Optional[dict] = None,
    tree_status: int = 200,
    tree_body: Optional[dict] = None,
    headers: Optional[dict] = None,
    seen: Optional[list] = None,
) -> Callable[[httpx.Request], httpx.Response]:
    """Build a MockTransport handler answering the two GitHub endpoints."""
    if repo_body is None:
        repo_body = {"full_name": "octo/demo", "default_branch": "main"}
    if tree_body is None:
        tree_body = {
            "sha": "abc123",
            "tree": [
                {"path": "README.md", "mode": "100644", "type": "blob", "size": 1200},
                {"path": "src", "mode": "040000", "type": "tree"},
                {"path": "src/index.ts", "mode": "100644", "type": "blob", "size": 4096},
            ],
            "truncated": False,
        }

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if "/git/trees/" in request.url.path:
            return httpx.Response(tree_status, json=tree_body, headers=headers or {})
        return httpx.Response(repo_status, json=repo_body, headers=headers or {})

    return handler


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every environment variable the package reads."""
    for name in (
        "GITHUB_TOKEN",
        "GITHUB_API_BASE",
        "VIBE_BLOAT_THRESHOLD",
        "VIBE_SPARSE_THRESHOLD",
        "VIBE_TOP_FILES",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
