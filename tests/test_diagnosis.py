"""End-to-end diagnosis against a mocked GitHub API."""

import httpx
import pytest

from vibe_doctor.core.diagnosis import diagnose_repository
from vibe_doctor.core.errors import RateLimitedError
from vibe_doctor.core.models import HealthStatus
from vibe_doctor.core.scoring import ScoringProfile

from conftest import github_handler


@pytest.mark.asyncio
async def test_diagnose_scores_fetched_tree():
    tree_body = {
        "tree": [{"path": "README.md", "type": "blob", "size": 100}]
        + [{"path": f"src/mod{i}.js", "type": "blob", "size": i * 10} for i in range(8)]
        + [{"path": ".env", "type": "blob", "size": 64}],
        "truncated": False,
    }
    diagnosis = await diagnose_repository(
        "octo/demo",
        transport=httpx.MockTransport(github_handler(tree_body=tree_body)),
    )

    assert diagnosis.repository.full_name == "octo/demo"
    assert diagnosis.repository.default_branch == "main"
    assert diagnosis.report.score == 60
    assert diagnosis.report.status == HealthStatus.STABLE
    assert [f.id for f in diagnosis.report.findings] == ["env"]
    assert diagnosis.report.largest_files[0].path == "README.md"
    assert any(f.path == ".env" and f.risk == 100 for f in diagnosis.report.largest_files)


@pytest.mark.asyncio
async def test_diagnose_applies_profile():
    diagnosis = await diagnose_repository(
        "octo/demo",
        profile=ScoringProfile(sparse_threshold=None),
        transport=httpx.MockTransport(github_handler()),
    )
    # Default tree: README.md, src/, src/index.ts, three entries
    assert diagnosis.report.file_count == 3
    assert diagnosis.report.score == 100


@pytest.mark.asyncio
async def test_diagnose_propagates_rate_limit():
    handler = github_handler(repo_status=403, repo_body={"message": "API rate limit exceeded"})
    with pytest.raises(RateLimitedError):
        await diagnose_repository("octo/demo", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_diagnosis_serializes_to_json():
    diagnosis = await diagnose_repository("octo/demo", transport=httpx.MockTransport(github_handler()))
    data = diagnosis.model_dump(mode="json")

    assert data["repository"]["full_name"] == "octo/demo"
    assert data["report"]["score"] == 90
    assert data["report"]["status"] == "peak"
    assert data["report"]["findings"][0]["id"] == "sparse"
    assert data["report"]["findings"][0]["severity"] == "warning"
    assert data["report"]["largest_files"][0]["size_label"] == "4 KB"


@pytest.mark.asyncio
async def test_empty_repository_scores_as_zero_files():
    handler = github_handler(tree_status=409, tree_body={"message": "Git Repository is empty."})
    diagnosis = await diagnose_repository("octo/empty", transport=httpx.MockTransport(handler))

    assert diagnosis.report.file_count == 0
    assert diagnosis.report.score == 65
    assert diagnosis.report.status == HealthStatus.STABLE
    assert [f.id for f in diagnosis.report.findings] == ["sparse", "readme"]
