from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from contramind.api.v1.dependencies import get_current_user, get_db
from contramind.models.user import User
from contramind.schemas.user import ProfileUpdate, UserRead
from contramind.services import users as user_service

router = APIRouter()


@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(get_current_user)) -> User:
    return current_user


@router.patch("/profile", response_model=UserRead)
def update_profile(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> User:
    user_service.update_profile(db, current_user, payload)
    db.commit()
    db.refresh(current_user)
    return current_user
