"""Core business logic: GitHub client, scoring and data models.

This module is framework-agnostic. It has no dependency on MCP, FastMCP,
or any server framework.
"""
