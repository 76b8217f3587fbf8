"""Utility modules for mermaidsync.

Provides:
- logger: get_logger for namespaced logging, block_logger for per-block records
"""

from mermaidsync.utils.logger import block_logger, get_logger

__all__ = ["block_logger", "get_logger"]
