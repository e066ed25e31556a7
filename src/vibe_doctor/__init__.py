"""Vibe Doctor MCP Server.

Ask your AI how healthy a GitHub repository looks: a 0-100 score, findings
with remedies, and the riskiest large files, computed from the repo's file tree.
"""

__version__ = "0.1.0"

from .core.diagnosis import diagnose_repository
from .core.scoring import score_files

__all__ = ["diagnose_repository", "score_files"]
