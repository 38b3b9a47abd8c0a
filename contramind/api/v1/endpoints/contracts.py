from __future__ import annotations

import logging
from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from contramind.api.v1.dependencies import get_analysis_dispatcher, get_current_user, get_db
from contramind.models.contract import Contract
from contramind.models.user import User
from contramind.schemas.common import SuccessResponse
from contramind.schemas.contract import (
    ContractCreate,
    ContractCreated,
    ContractDetail,
    ContractRead,
)
from contramind.services import contracts as contract_service

logger = logging.getLogger(__name__)

router = APIRouter()


def get_accessible_contract(db: Session, contract_id: int, user: User) -> Contract:
    """Load a contract the caller owns (admins may see any); 404/403 otherwise."""
    contract = contract_service.get_contract(db, contract_id)
    if not contract:
        raise HTTPException(status_code=404, detail="Contract not found")
    if contract.user_id != user.id and not user.is_admin:
        raise HTTPException(status_code=403, detail="Access denied")
    return contract


@router.post("", response_model=ContractCreated, status_code=status.HTTP_201_CREATED)
def create_contract(
    payload: ContractCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    dispatch: Callable[[int], None] = Depends(get_analysis_dispatcher),
) -> ContractCreated:
    contract = contract_service.create_contract(db, user_id=current_user.id, data=payload)
    db.commit()
    logger.info("Contract %s registered by user %s; scheduling analysis", contract.id, current_user.id)

    try:
        dispatch(contract.id)
    except Exception:  # pylint: disable=broad-except
        logger.exception("Failed to schedule analysis for contract %s; left in processing", contract.id)

    return ContractCreated(id=contract.id, status=contract.status)


@router.get("", response_model=list[ContractRead])
def list_contracts(
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[Contract]:
    return contract_service.list_user_contracts(db, current_user.id, limit=limit, offset=offset)


@router.get("/search", response_model=list[ContractRead])
def search_contracts(
    query: str = Query(min_length=1, max_length=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[Contract]:
    return contract_service.search_contracts(db, current_user.id, query)


@router.get("/{contract_id}", response_model=ContractDetail)
def get_contract(
    contract_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Contract:
    return get_accessible_contract(db, contract_id, current_user)


@router.delete("/{contract_id}", response_model=SuccessResponse)
def delete_contract(
    contract_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> SuccessResponse:
    contract = get_accessible_contract(db, contract_id, current_user)
    contract_service.delete_contract(db, contract)
    db.commit()
    logger.info("Contract %s deleted by user %s", contract_id, current_user.id)
    return SuccessResponse()
