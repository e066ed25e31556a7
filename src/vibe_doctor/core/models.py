"""Pydantic data models, the shared business objects.

The GitHub client, the scorer, and the MCP server all exchange these models.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class EntryKind(str, Enum):
    """Git tree entry type."""

    BLOB = "blob"
    TREE = "tree"
    COMMIT = "commit"  # submodule


class Severity(str, Enum):
    """How urgently a finding needs attention."""

    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class HealthStatus(str, Enum):
    """Overall health band for a score."""

    CRITICAL = "critical"
    STABLE = "stable"
    PEAK = "peak"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    @property
    def summary(self) -> str:
        return _STATUS_SUMMARIES[self]


_STATUS_LABELS = {
    HealthStatus.CRITICAL: "Critical",
    HealthStatus.STABLE: "Stable",
    HealthStatus.PEAK: "Peak Form",
}

_STATUS_SUMMARIES = {
    HealthStatus.CRITICAL: "Needs immediate life support.",
    HealthStatus.STABLE: "Functional but fatigued.",
    HealthStatus.PEAK: "Excellent code hygiene.",
}


class FileHealth(str, Enum):
    """Per-file health label derived from its risk."""

    CRITICAL = "critical"
    WARNING = "warning"
    HEALTHY = "healthy"


class FileEntry(BaseModel):
    """A single entry from a recursive git tree listing."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    path: str
    size: int = Field(default=0, ge=0, description="Size in bytes (0 for trees)")
    kind: EntryKind = Field(default=EntryKind.BLOB, alias="type")

    @property
    def is_blob(self) -> bool:
        return self.kind == EntryKind.BLOB


class Finding(BaseModel):
    """One rule violation surfaced to the user with a suggested remedy."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Stable rule identifier, e.g. 'readme'")
    severity: Severity
    title: str
    explanation: str = Field(description="What was detected")
    remedy: str = Field(description="How to fix it")
    urgency: str = Field(description="Rough time-to-fix label, e.g. '15 min'")


_BYTE_UNITS = ["B", "KB", "MB", "GB"]


def format_bytes(size: int) -> str:
    """Human-readable byte count using 1024 steps, e.g. 1536 -> '1.5 KB'."""
    if not size:
        return "0 B"
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(_BYTE_UNITS) - 1:
        value /= 1024
        unit += 1
    text = f"{value:.1f}".rstrip("0").rstrip(".")
    return f"{text} {_BYTE_UNITS[unit]}"


class FileRisk(BaseModel):
    """A large file annotated with a risk percentage."""

    model_config = ConfigDict(frozen=True)

    path: str
    size: int = Field(ge=0)
    risk: int = Field(ge=0, le=100, description="Risk percentage")
    health: FileHealth

    @computed_field  # type: ignore[prop-decorator]
    @property
    def display_name(self) -> str:
        if len(self.path) > 35:
            return "..." + self.path[-30:]
        return self.path

    @computed_field  # type: ignore[prop-decorator]
    @property
    def size_label(self) -> str:
        return format_bytes(self.size)


class Report(BaseModel):
    """Aggregate output of one scoring run."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100)
    status: HealthStatus
    summary: str
    findings: list[Finding] = Field(default_factory=list)
    largest_files: list[FileRisk] = Field(default_factory=list)
    file_count: int = Field(ge=0)
    is_typescript: bool = False

    @property
    def status_label(self) -> str:
        return self.status.label

    @property
    def critical_findings(self) -> list[Finding]:
        return [f for f in self.findings if f.severity == Severity.CRITICAL]

    def finding(self, finding_id: str) -> Optional[Finding]:
        return next((f for f in self.findings if f.id == finding_id), None)


class RepositoryListing(BaseModel):
    """Raw result of fetching a repository's recursive file tree."""

    owner: str
    name: str
    default_branch: str
    files: list[FileEntry]
    truncated: bool = Field(False, description="GitHub cut the tree short (very large repos)")

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


class RepositoryInfo(BaseModel):
    """Repository coordinates attached to a diagnosis."""

    owner: str
    name: str
    default_branch: str
    truncated: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


class Diagnosis(BaseModel):
    """A report together with the repository it was computed for."""

    repository: RepositoryInfo
    report: Report
