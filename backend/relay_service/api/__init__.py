"""
API module for external service clients.

This module provides:
- Telegram Bot API client and update models
- Conversational backend client (Voiceflow runtime)
"""

from .telegram_client import TelegramClient
from .telegram_models import Update, Message, PhotoSize, Document, User, Chat
from .backend_client import (
    ConversationRelay,
    NO_TEXT_REPLY,
    TRUNCATION_MARKER,
    collect_messages,
    parse_traces,
    truncate,
)

__all__ = [
    'TelegramClient',
    'Update', 'Message', 'PhotoSize', 'Document', 'User', 'Chat',
    'ConversationRelay',
    'NO_TEXT_REPLY',
    'TRUNCATION_MARKER',
    'collect_messages',
    'parse_traces',
    'truncate',
]
