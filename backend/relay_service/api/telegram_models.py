"""
Pydantic models for the subset of Telegram Bot API updates the relay handles
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TelegramModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class User(TelegramModel):
    id: int = Field(..., description="Stable user identifier")
    first_name: Optional[str] = None
    username: Optional[str] = None


class Chat(TelegramModel):
    id: int = Field(..., description="Chat identifier replies are sent to")
    type: Optional[str] = None


class PhotoSize(TelegramModel):
    file_id: str
    file_unique_id: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    file_size: Optional[int] = None


class Document(TelegramModel):
    file_id: str
    file_unique_id: Optional[str] = None
    file_name: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None


class Message(TelegramModel):
    message_id: int
    chat: Chat
    from_user: Optional[User] = Field(default=None, alias="from")
    text: Optional[str] = None
    caption: Optional[str] = None
    photo: Optional[List[PhotoSize]] = None
    document: Optional[Document] = None

    @property
    def is_start_command(self) -> bool:
        parts = self.text.split() if self.text else []
        return bool(parts) and parts[0].split("@")[0] == "/start"


class Update(TelegramModel):
    update_id: int
    message: Optional[Message] = None
