from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from contramind.schemas.contract import StoredFileIn


class KnowledgeBaseCreate(StoredFileIn):
    extracted_text: str | None = None
    description: str | None = None


class KnowledgeBaseRead(BaseModel):
    id: int
    user_id: int
    filename: str
    file_key: str
    file_url: str
    file_size: int
    mime_type: str
    description: str | None = None
    uploaded_at: datetime

    model_config = ConfigDict(from_attributes=True)


class KnowledgeBaseCreated(BaseModel):
    id: int
