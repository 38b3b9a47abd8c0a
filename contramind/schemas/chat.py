from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from contramind.models.enums import FeedbackRating, MessageRole


class SendMessageRequest(BaseModel):
    contract_id: int
    content: str = Field(min_length=1, max_length=10_000)
    prompt_type: str | None = Field(default=None, max_length=100)


class SendMessageResponse(BaseModel):
    user_message_id: int
    ai_message_id: int
    response: str


class AiMessageRead(BaseModel):
    id: int
    contract_id: int
    user_id: int
    role: MessageRole
    content: str
    tokens_used: int | None = None
    prompt_type: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FeedbackCreate(BaseModel):
    message_id: int
    rating: FeedbackRating
    comment: str | None = Field(default=None, max_length=2000)


class SuggestedPrompts(BaseModel):
    language: str
    prompts: list[str]
