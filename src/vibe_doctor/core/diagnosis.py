"""Fetch a repository's file tree and score it."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from .clients import github
from .models import Diagnosis, RepositoryInfo
from .scoring import DEFAULT_PROFILE, ScoringProfile, score_files

logger = logging.getLogger(__name__)


async def diagnose_repository(
    repo: str,
    token: Optional[str] = None,
    *,
    profile: Optional[ScoringProfile] = None,
    api_base: str = github.API_BASE,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Diagnosis:
    """Run one analysis: two sequential GitHub calls, then the scorer.

    Fetch errors propagate unchanged; retrying (for example with a token
    after RateLimitedError) is the caller's decision.
    """
    listing = await github.fetch_repository_files(repo, token, api_base=api_base, transport=transport)
    report = score_files(listing.files, profile or DEFAULT_PROFILE)
    logger.info(
        "Diagnosed %s: score %d (%s), %d findings",
        listing.full_name,
        report.score,
        report.status.label,
        len(report.findings),
    )
    return Diagnosis(
        repository=RepositoryInfo(
            owner=listing.owner,
            name=listing.name,
            default_branch=listing.default_branch,
            truncated=listing.truncated,
        ),
        report=report,
    )
