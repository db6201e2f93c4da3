"""Prompt task orchestration and bounded batch execution."""
