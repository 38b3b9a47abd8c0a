from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from contramind.core.config import settings
from contramind.models.enums import (
    ComplianceStatus,
    ContractStatus,
    DetectedLanguage,
    RiskScore,
)

ACCEPTED_MIME_TYPES = frozenset(
    {
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "text/plain",
    }
)


class StoredFileIn(BaseModel):
    """Reference to an object the client already put in storage."""

    filename: str = Field(min_length=1, max_length=500)
    file_key: str = Field(min_length=1, max_length=500)
    file_url: str = Field(min_length=1)
    file_size: int = Field(gt=0)
    mime_type: str = Field(min_length=1, max_length=100)


class ContractCreate(StoredFileIn):
    @field_validator("file_size")
    @classmethod
    def check_size(cls, value: int) -> int:
        if value > settings.MAX_UPLOAD_BYTES:
            raise ValueError(
                f"File too large: {value / 1024 / 1024:.2f}MB "
                f"(max: {settings.MAX_UPLOAD_BYTES // (1024 * 1024)}MB)"
            )
        return value

    @field_validator("mime_type")
    @classmethod
    def check_mime_type(cls, value: str) -> str:
        if value not in ACCEPTED_MIME_TYPES:
            raise ValueError(f"Unsupported file type: {value}")
        return value


class ContractCreated(BaseModel):
    id: int
    status: ContractStatus


class ContractRead(BaseModel):
    id: int
    user_id: int
    filename: str
    file_key: str
    file_url: str
    file_size: int
    mime_type: str
    status: ContractStatus
    error_message: str | None = None
    detected_language: DetectedLanguage | None = None
    risk_score: RiskScore | None = None
    sharia_compliance: ComplianceStatus | None = None
    ksa_compliance: ComplianceStatus | None = None
    analysis: dict[str, Any] | None = None
    uploaded_at: datetime
    analyzed_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class ContractDetail(ContractRead):
    extracted_text: str | None = None
