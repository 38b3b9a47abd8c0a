"""Pydantic schemas package."""
from contramind.schemas.analysis import ContractAnalysisResult, KeyTerm
from contramind.schemas.chat import (
    AiMessageRead,
    FeedbackCreate,
    SendMessageRequest,
    SendMessageResponse,
    SuggestedPrompts,
)
from contramind.schemas.common import SuccessResponse
from contramind.schemas.contract import (
    ContractCreate,
    ContractCreated,
    ContractDetail,
    ContractRead,
)

__all__ = [
    "AiMessageRead",
    "ContractAnalysisResult",
    "ContractCreate",
    "ContractCreated",
    "ContractDetail",
    "ContractRead",
    "FeedbackCreate",
    "KeyTerm",
    "SendMessageRequest",
    "SendMessageResponse",
    "SuccessResponse",
    "SuggestedPrompts",
]
