"""Repository health scoring.

Starts from 100 and subtracts a fixed penalty for each rule that fires.
Rules are independent threshold checks over one flat list of tree entries,
so the score can only go down as more rules fire. The function is pure:
the same listing and profile always produce the same report.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .models import (
    FileEntry,
    FileHealth,
    FileRisk,
    Finding,
    HealthStatus,
    Report,
    Severity,
)

logger = logging.getLogger(__name__)

MAX_SCORE = 100
MIN_SCORE = 0

MB = 1024 * 1024

LOCKFILE_NAMES = ("package-lock.json", "yarn.lock", "pnpm-lock.yaml", "bun.lockb")
TEST_MARKERS = (".test.", ".spec.")
TEST_DIR_PREFIXES = ("test/", "tests/", "__tests__/")
TYPESCRIPT_EXTENSIONS = (".ts", ".tsx")


class ScoringProfile(BaseModel):
    """Thresholds and penalties for the health rules.

    File-count thresholds vary by product (near-duplicate variants used
    50 or 1000 for bloat and 3 or 5 for sparse), so they are configurable.
    Set a threshold to None to switch its rule off.
    """

    model_config = ConfigDict(frozen=True)

    bloat_threshold: Optional[int] = Field(1000, ge=0, description="Bloat fires when file count exceeds this")
    sparse_threshold: Optional[int] = Field(5, ge=0, description="Sparse fires when file count is below this")
    tests_min_files: int = Field(20, ge=0, description="Missing tests only matter above this many files")
    typescript_min_files: int = Field(30, ge=0, description="Missing TypeScript only matters above this many files")

    bloat_penalty: int = Field(20, ge=0)
    sparse_penalty: int = Field(10, ge=0)
    node_modules_penalty: int = Field(30, ge=0)
    readme_penalty: int = Field(25, ge=0)
    env_penalty: int = Field(40, ge=0)
    lockfile_penalty: int = Field(10, ge=0)
    tests_penalty: int = Field(5, ge=0)
    typescript_penalty: int = Field(5, ge=0)

    critical_below: int = Field(50, ge=0, le=100)
    stable_below: int = Field(80, ge=0, le=100)
    top_files: int = Field(5, ge=0, description="How many of the largest blobs to report")

    @model_validator(mode="after")
    def _check_bands(self) -> "ScoringProfile":
        if self.critical_below > self.stable_below:
            raise ValueError(
                f"critical_below ({self.critical_below}) must not exceed stable_below ({self.stable_below})"
            )
        return self

    def penalty_for(self, rule_id: str) -> int:
        return getattr(self, RULE_CATALOG[rule_id]["penalty"])


DEFAULT_PROFILE = ScoringProfile()

# Rule id -> static finding text and the profile field holding its penalty
RULE_CATALOG: dict[str, dict] = {
    "bloat": {"title": "Massive Complexity", "severity": Severity.WARNING, "remedy": "Consider monorepo tools or split the project.", "urgency": "Long-term", "penalty": "bloat_penalty"},
    "sparse": {"title": "Sparse Repository", "severity": Severity.WARNING, "remedy": "Push the rest of the project or add the missing scaffolding.", "urgency": "30 min", "penalty": "sparse_penalty"},
    "modules": {"title": "Forbidden Commit", "severity": Severity.CRITICAL, "remedy": "Remove node_modules from git immediately and add it to .gitignore.", "urgency": "IMMEDIATE", "penalty": "node_modules_penalty"},
    "readme": {"title": "Missing Documentation", "severity": Severity.CRITICAL, "remedy": "Add a README.md describing the project.", "urgency": "15 min", "penalty": "readme_penalty"},
    "env": {"title": "Secret Leak", "severity": Severity.CRITICAL, "remedy": "Rotate keys & remove the file from history.", "urgency": "EMERGENCY", "penalty": "env_penalty"},
    "lock": {"title": "Unstable Dependencies", "severity": Severity.WARNING, "remedy": "Commit the lockfile.", "urgency": "2 min", "penalty": "lockfile_penalty"},
    "tests": {"title": "No Tests", "severity": Severity.INFO, "remedy": "Add unit tests.", "urgency": "1 hour", "penalty": "tests_penalty"},
    "ts": {"title": "Type Safety Gap", "severity": Severity.INFO, "remedy": "Migrate to TypeScript.", "urgency": "Elective", "penalty": "typescript_penalty"},
}


def _finding(rule_id: str, explanation: str) -> Finding:
    rule = RULE_CATALOG[rule_id]
    return Finding(
        id=rule_id,
        severity=rule["severity"],
        title=rule["title"],
        explanation=explanation,
        remedy=rule["remedy"],
        urgency=rule["urgency"],
    )


def _is_leaked_env(path: str) -> bool:
    return ".env" in path and "example" not in path and "sample" not in path


def _is_test_path(path: str) -> bool:
    return any(m in path for m in TEST_MARKERS) or path.startswith(TEST_DIR_PREFIXES)


def status_for_score(score: int, profile: ScoringProfile = DEFAULT_PROFILE) -> HealthStatus:
    """Map a score to its health band."""
    if score < profile.critical_below:
        return HealthStatus.CRITICAL
    if score < profile.stable_below:
        return HealthStatus.STABLE
    return HealthStatus.PEAK


def assess_file_risk(entry: FileEntry) -> FileRisk:
    """Annotate a file with a risk percentage.

    Path-based checks win over size: a committed .env is always 100,
    anything under node_modules is always 90.
    """
    if ".env" in entry.path:
        risk, health = 100, FileHealth.CRITICAL
    elif "node_modules" in entry.path:
        risk, health = 90, FileHealth.CRITICAL
    elif entry.size > 5 * MB:
        risk, health = 80, FileHealth.WARNING
    elif entry.size > 1 * MB:
        risk, health = 40, FileHealth.WARNING
    else:
        risk, health = 5, FileHealth.HEALTHY
    return FileRisk(path=entry.path, size=entry.size, risk=risk, health=health)


def largest_files(files: Iterable[FileEntry], limit: int = DEFAULT_PROFILE.top_files) -> list[FileRisk]:
    """The `limit` largest blobs, biggest first, each with its risk."""
    blobs = sorted((f for f in files if f.is_blob), key=lambda f: f.size, reverse=True)
    return [assess_file_risk(f) for f in blobs[:limit]]


def score_files(files: Iterable[FileEntry], profile: ScoringProfile = DEFAULT_PROFILE) -> Report:
    """Score a repository listing.

    Every rule is checked independently against the full listing; each one
    that fires adds a finding and subtracts its penalty. The score is
    clamped to [0, 100].
    """
    files = list(files)
    paths = [f.path for f in files]
    file_count = len(files)

    has_readme = any(p.lower() == "readme.md" for p in paths)
    env_file = next((p for p in paths if _is_leaked_env(p)), None)
    has_node_modules = any("node_modules/" in p for p in paths)
    has_lockfile = any(name in p for p in paths for name in LOCKFILE_NAMES)
    has_package_json = "package.json" in paths
    is_typescript = any(p.endswith(TYPESCRIPT_EXTENSIONS) for p in paths)
    has_tests = any(_is_test_path(p) for p in paths)

    findings: list[Finding] = []

    if profile.bloat_threshold is not None and file_count > profile.bloat_threshold:
        findings.append(_finding("bloat", f"Detected {file_count}+ files."))
    if profile.sparse_threshold is not None and file_count < profile.sparse_threshold:
        findings.append(_finding("sparse", f"Only {file_count} files found."))
    if has_node_modules:
        findings.append(_finding("modules", "'node_modules' found in the repository."))
    if not has_readme:
        findings.append(_finding("readme", "No README.md at the repository root."))
    if env_file is not None:
        findings.append(_finding("env", f"Secrets leaked: '{env_file}' is committed."))
    if has_package_json and not has_lockfile:
        findings.append(_finding("lock", "package.json without a lockfile."))
    if not has_tests and file_count > profile.tests_min_files:
        findings.append(_finding("tests", "No tests detected."))
    if not is_typescript and file_count > profile.typescript_min_files:
        findings.append(_finding("ts", "Large codebase without TypeScript."))

    score = MAX_SCORE - sum(profile.penalty_for(f.id) for f in findings)
    score = max(MIN_SCORE, min(MAX_SCORE, score))
    status = status_for_score(score, profile)

    logger.debug("Scored %d entries: %d (%s), %d findings", file_count, score, status.value, len(findings))

    return Report(
        score=score,
        status=status,
        summary=status.summary,
        findings=findings,
        largest_files=largest_files(files, profile.top_files),
        file_count=file_count,
        is_typescript=is_typescript,
    )


def rules(profile: ScoringProfile = DEFAULT_PROFILE) -> list[dict]:
    """Describe every rule with its active penalty, for display."""
    return [
        {
            "id": rule_id,
            "title": rule["title"],
            "severity": rule["severity"].value,
            "penalty": profile.penalty_for(rule_id),
            "enabled": not (
                (rule_id == "bloat" and profile.bloat_threshold is None)
                or (rule_id == "sparse" and profile.sparse_threshold is None)
            ),
        }
        for rule_id, rule in RULE_CATALOG.items()
    ]
