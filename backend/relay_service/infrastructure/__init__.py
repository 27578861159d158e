"""
Infrastructure module.

This module provides infrastructure components including:
- Unified logging system
- Append-only extraction log
- Attachment staging area
- API usage monitoring
"""

from .logging import LogConfig, RelayLogger, get_logger
from .extraction_log import ExtractionLog, safe_short
from .staging import StagingArea, sanitize_filename
from .monitoring import UsageMonitor

__all__ = [
    'LogConfig', 'RelayLogger', 'get_logger',
    'ExtractionLog', 'safe_short',
    'StagingArea', 'sanitize_filename',
    'UsageMonitor',
]
