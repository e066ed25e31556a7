"""Error taxonomy for repository analysis.

Every failure carries a machine-readable ``code`` so callers (the MCP server,
a UI) can branch on it. Rate limiting is kept distinct so the caller can ask
for an access token and retry; nothing here retries on its own.
"""

from __future__ import annotations

from typing import Optional


class VibeDoctorError(Exception):
    """Base class for all analysis failures."""

    code = "error"


class InvalidRepositoryError(VibeDoctorError, ValueError):
    """The repository reference could not be parsed as ``owner/repo``."""

    code = "invalid_input"


class RepositoryNotFoundError(VibeDoctorError):
    """The repository (or its file tree) does not exist or is private."""

    code = "not_found"


class RateLimitedError(VibeDoctorError):
    """GitHub refused the request because of API rate limits."""

    code = "rate_limited"

    def __init__(self, message: str, reset_at: Optional[int] = None):
        super().__init__(message)
        self.reset_at = reset_at


class GitHubConnectionError(VibeDoctorError):
    """Any other failure talking to the GitHub API."""

    code = "connection_failed"
