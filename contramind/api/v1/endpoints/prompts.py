from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from contramind.api.v1.dependencies import get_db
from contramind.models.admin import PromptLibraryEntry
from contramind.schemas.admin import PromptRead
from contramind.services import prompts as prompt_service

router = APIRouter()


@router.get("", response_model=list[PromptRead])
def list_prompts(db: Session = Depends(get_db)) -> list[PromptLibraryEntry]:
    return prompt_service.list_active_prompts(db)


@router.get("/category/{category}", response_model=list[PromptRead])
def list_prompts_by_category(category: str, db: Session = Depends(get_db)) -> list[PromptLibraryEntry]:
    return prompt_service.list_prompts_by_category(db, category)
