"""General utilities for Promptline."""

from .logging import setup_logging

__all__ = ["setup_logging"]
