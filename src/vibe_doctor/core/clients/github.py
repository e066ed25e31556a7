"""GitHub REST API client.

API docs: https://docs.github.com/en/rest/git/trees
Unauthenticated: 60 requests/hour per IP. With a token: 5,000 requests/hour.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

import httpx
from pydantic import ValidationError

from ..errors import (
    GitHubConnectionError,
    InvalidRepositoryError,
    RateLimitedError,
    RepositoryNotFoundError,
)
from ..models import FileEntry, RepositoryListing

logger = logging.getLogger(__name__)

API_BASE = "https://api.github.com"
API_VERSION = "2022-11-28"
USER_AGENT = "vibe-doctor"

RATE_LIMIT_STATUSES = (403, 429)
EMPTY_REPOSITORY_STATUS = 409

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_HOST_RE = re.compile(r"^(www\.)?github\.com/", re.IGNORECASE)


def parse_repo_slug(text: str) -> tuple[str, str]:
    """Normalize 'owner/repo' or a GitHub URL into an (owner, repo) pair.

    Accepts 'facebook/react', 'github.com/facebook/react',
    'https://github.com/facebook/react/' and '.../react.git'.
    Anything after the second path segment is ignored.
    """
    cleaned = _SCHEME_RE.sub("", (text or "").strip())
    cleaned = _HOST_RE.sub("", cleaned).rstrip("/")
    parts = [p for p in cleaned.split("/") if p]
    if len(parts) < 2:
        raise InvalidRepositoryError(
            "Invalid format. Please use 'owner/repo' (e.g., facebook/react)"
        )
    owner, repo = parts[0], parts[1]
    if repo.endswith(".git"):
        repo = repo[:-4]
    if not repo:
        raise InvalidRepositoryError(f"Missing repository name in {text!r}")
    return owner, repo


def _headers(token: Optional[str]) -> dict[str, str]:
    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": API_VERSION,
        "User-Agent": USER_AGENT,
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _rate_limited(response: httpx.Response) -> RateLimitedError:
    reset = response.headers.get("X-RateLimit-Reset")
    reset_at = int(reset) if reset and reset.isdigit() else None
    logger.warning("GitHub rate limit hit (status %d, reset at %s)", response.status_code, reset_at)
    return RateLimitedError(
        "GitHub API rate limit exceeded. Provide an access token and retry.",
        reset_at=reset_at,
    )


def _parse_tree(entries: list) -> list[FileEntry]:
    """Parse git tree entries, skipping malformed records."""
    files = []
    for entry in entries:
        try:
            files.append(FileEntry.model_validate(entry))
        except ValidationError as exc:
            logger.debug("Skipping malformed tree entry %r: %s", entry, exc)
    return files


async def fetch_repository_files(
    repo: str,
    token: Optional[str] = None,
    *,
    api_base: str = API_BASE,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> RepositoryListing:
    """Fetch the full recursive file tree of a repository's default branch.

    Args:
        repo: 'owner/repo' or a GitHub URL.
        token: Optional personal access token, sent as a bearer credential.
        api_base: API root (override for GitHub Enterprise).
        transport: Optional httpx transport (used by tests).

    Returns:
        RepositoryListing with the raw list of tree entries.

    Raises:
        InvalidRepositoryError, RepositoryNotFoundError, RateLimitedError,
        GitHubConnectionError.
    """
    owner, name = parse_repo_slug(repo)
    base = api_base.rstrip("/")
    logger.info("Fetching file tree for %s/%s", owner, name)

    async with httpx.AsyncClient(
        timeout=httpx.Timeout(30.0, connect=10.0),
        headers=_headers(token),
        transport=transport,
        follow_redirects=True,
    ) as client:
        try:
            repo_response = await client.get(f"{base}/repos/{owner}/{name}")
        except httpx.HTTPError as exc:
            raise GitHubConnectionError(f"Connection failed: {exc}") from exc

        if not repo_response.is_success:
            if repo_response.status_code == 404:
                raise RepositoryNotFoundError("Repository not found (or private).")
            if repo_response.status_code in RATE_LIMIT_STATUSES:
                raise _rate_limited(repo_response)
            raise GitHubConnectionError(f"Connection failed (HTTP {repo_response.status_code}).")

        try:
            branch = repo_response.json()["default_branch"]
        except (ValueError, KeyError, TypeError) as exc:
            raise GitHubConnectionError("Unexpected repository metadata response.") from exc
        if not isinstance(branch, str) or not branch:
            raise GitHubConnectionError("Unexpected repository metadata response.")

        try:
            tree_response = await client.get(
                f"{base}/repos/{owner}/{name}/git/trees/{branch}",
                params={"recursive": "1"},
            )
        except httpx.HTTPError as exc:
            raise GitHubConnectionError(f"Connection failed: {exc}") from exc

    if tree_response.status_code in RATE_LIMIT_STATUSES:
        raise _rate_limited(tree_response)
    if tree_response.status_code == 404:
        raise RepositoryNotFoundError("Could not access file tree.")
    if tree_response.status_code == EMPTY_REPOSITORY_STATUS:
        # No commits yet, so there is no tree to list
        logger.info("Repository %s/%s is empty", owner, name)
        return RepositoryListing(owner=owner, name=name, default_branch=branch, files=[])
    if not tree_response.is_success:
        raise GitHubConnectionError(f"Connection failed (HTTP {tree_response.status_code}).")

    try:
        data = tree_response.json()
    except ValueError as exc:
        raise GitHubConnectionError("Unexpected file tree response.") from exc
    if not isinstance(data, dict):
        raise GitHubConnectionError("Unexpected file tree response.")

    if data.get("message") == "Not Found":
        raise RepositoryNotFoundError("Could not access file tree.")

    files = _parse_tree(data.get("tree") or [])
    truncated = bool(data.get("truncated", False))
    if truncated:
        logger.warning("File tree for %s/%s was truncated by GitHub (%d entries)", owner, name, len(files))

    logger.info("Fetched %d entries for %s/%s@%s", len(files), owner, name, branch)
    return RepositoryListing(
        owner=owner,
        name=name,
        default_branch=branch,
        files=files,
        truncated=truncated,
    )
