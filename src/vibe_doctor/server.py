"""Vibe Doctor MCP Server.

FastMCP server with repository health tools.
Run: vibe-doctor-mcp
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import ValidationError

from . import config
from .core.diagnosis import diagnose_repository
from .core.errors import RateLimitedError, VibeDoctorError
from .core.models import Diagnosis, FileEntry, Report
from .core.scoring import rules, score_files

logger = logging.getLogger(__name__)

READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=True)
OFFLINE = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=False)

TOKEN_HELP_URL = "https://github.com/settings/tokens/new?description=Vibe%20Doctor&scopes=public_repo"


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[None]:
    """Configure logging for the server process."""
    logging.basicConfig(level=config.get_log_level(), format="%(asctime)s %(name)s %(levelname)s %(message)s")
    logger.info("Vibe Doctor server starting")
    yield


mcp = FastMCP(
    "Vibe Doctor",
    instructions="Diagnose the health of a public GitHub repository. Returns a 0-100 score and findings with remedies, plus the riskiest large files, computed from the repository's file tree.",
    lifespan=lifespan,
)


# ─── Response envelopes ──────────────────────────────────────────────────────


def err(
    code: str,
    message: str,
    details: Optional[dict[str, Any]] = None,
    next_steps: Optional[list[dict[str, Any]]] = None,
) -> dict[str, Any]:
    """Build a structured error envelope."""
    return {
        "ok": False,
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
            "nextSteps": next_steps or [],
        },
    }


def ok(result: dict[str, Any]) -> dict[str, Any]:
    """Build a structured success envelope."""
    return {"ok": True, "result": result}


def _error_envelope(exc: VibeDoctorError, repo: str) -> dict[str, Any]:
    details: dict[str, Any] = {"repo": repo}
    next_steps: list[dict[str, Any]] = []
    if isinstance(exc, RateLimitedError):
        if exc.reset_at is not None:
            details["resetAt"] = exc.reset_at
        next_steps.append({
            "action": "retry_with_token",
            "description": "Create a GitHub personal access token and call vibe_diagnose again with token=...",
            "url": TOKEN_HELP_URL,
        })
    return err(exc.code, str(exc), details, next_steps)


def _report_summary(report: Report) -> str:
    if not report.findings:
        return f"Score {report.score}/100 ({report.status.label}). {report.summary} No issues found."
    titles = ", ".join(f.title for f in report.findings)
    return f"Score {report.score}/100 ({report.status.label}). {report.summary} Findings: {titles}."


def _diagnosis_result(diagnosis: Diagnosis) -> dict[str, Any]:
    result = diagnosis.model_dump(mode="json")
    summary = f"{diagnosis.repository.full_name}: {_report_summary(diagnosis.report)}"
    if diagnosis.repository.truncated:
        summary += " (GitHub truncated the file tree; counts are a lower bound.)"
    result["summary"] = summary
    return result


# ─── Tool 1: Diagnose ────────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def vibe_diagnose(repo: str, token: str = "") -> dict:
    """Diagnose a public GitHub repository: health score, findings and largest files.

    Args:
        repo: 'owner/repo' or a GitHub URL (e.g., 'facebook/react').
        token: Optional GitHub access token. Falls back to GITHUB_TOKEN.
               Needed when the anonymous rate limit (60 requests/hour) is exhausted.
    """
    try:
        diagnosis = await diagnose_repository(
            repo,
            token or config.get_github_token(),
            profile=config.load_scoring_profile(),
            api_base=config.get_api_base(),
        )
    except VibeDoctorError as exc:
        logger.warning("Diagnosis of %r failed: %s (%s)", repo, exc, exc.code)
        return _error_envelope(exc, repo)
    return ok(_diagnosis_result(diagnosis))


# ─── Tool 2: Score a listing ─────────────────────────────────────────────────


@mcp.tool(annotations=OFFLINE)
async def vibe_score_files(files: list[dict]) -> dict:
    """Score a file listing you already have, without calling GitHub.

    Args:
        files: Entries like {"path": "src/app.ts", "size": 1024, "type": "blob"}.
               'size' defaults to 0 and 'type' to 'blob'.
    """
    try:
        entries = [FileEntry.model_validate(f) for f in files]
    except ValidationError as exc:
        return err("invalid_input", "Malformed file entry.", {"errors": exc.errors(include_url=False, include_context=False, include_input=False)})

    report = score_files(entries, config.load_scoring_profile())
    result = report.model_dump(mode="json")
    result["summary"] = _report_summary(report)
    return ok(result)


# ─── Tool 3: Rules ───────────────────────────────────────────────────────────


@mcp.tool(annotations=OFFLINE)
async def vibe_rules() -> dict:
    """List the health rules, their penalties, and the active thresholds."""
    profile = config.load_scoring_profile()
    rule_table = rules(profile)
    return {
        "title": "Health Rules",
        "profile": profile.model_dump(),
        "rules": rule_table,
        "summary": f"{sum(1 for r in rule_table if r['enabled'])} of {len(rule_table)} rules enabled. Scores start at 100; each triggered rule subtracts its penalty.",
    }


def main():
    """Entry point for the CLI command."""
    mcp.run()


if __name__ == "__main__":
    main()
