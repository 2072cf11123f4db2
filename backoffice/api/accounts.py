from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from backoffice.infrastructure.db import get_db
from backoffice.application.service import AccountService
from backoffice.application.schemas import (
    AccountCreate, AccountRead, AccountUpdate, Page, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE,
)

router = APIRouter(prefix="/accounts", tags=["accounts"])

@router.get("", response_model=Page[AccountRead])
def list_accounts(
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    take: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Maximum number of records to return"),
):
    """List accounts in id order together with the total count"""
    return AccountService(db).list(skip=skip, take=take)

@router.get("/{account_id}", response_model=AccountRead)
def get_account(account_id: int, db: Session = Depends(get_db)):
    account = AccountService(db).get(account_id)
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")
    return account

@router.post("", response_model=AccountRead, status_code=201)
def create_account(payload: AccountCreate, db: Session = Depends(get_db)):
    return AccountService(db).create(payload)

@router.patch("/{account_id}", response_model=AccountRead)
def update_account(account_id: int, payload: AccountUpdate, db: Session = Depends(get_db)):
    return AccountService(db).update(account_id, payload)
