"""
Core module containing the per-message pipeline and the long-poll loop.
"""

from .handlers import MessageHandler
from .polling import run_polling

__all__ = [
    'MessageHandler',
    'run_polling',
]
