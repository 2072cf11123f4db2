from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import Optional
from backoffice.infrastructure.db import get_db
from backoffice.application.service import PaymentService
from backoffice.application.schemas import (
    PaymentCreate, PaymentRead, PaymentUpdate, Page, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE,
)

router = APIRouter(prefix="/payments", tags=["payments"])

@router.get("", response_model=Page[PaymentRead])
def list_payments(
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    take: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Maximum number of records to return"),
    account_id: Optional[int] = Query(None, alias="accountId", description="Only payments of this account"),
):
    """List payments, optionally for one account; total counts the same filter"""
    return PaymentService(db).list(skip=skip, take=take, account_id=account_id)

@router.get("/{payment_id}", response_model=PaymentRead)
def get_payment(payment_id: int, db: Session = Depends(get_db)):
    payment = PaymentService(db).get(payment_id)
    if not payment:
        raise HTTPException(status_code=404, detail="Payment not found")
    return payment

@router.post("/{account_id}", response_model=PaymentRead, status_code=201)
def create_payment(account_id: int, payload: PaymentCreate, db: Session = Depends(get_db)):
    return PaymentService(db).create(account_id, payload)

@router.patch("/{payment_id}", response_model=PaymentRead)
def update_payment(payment_id: int, payload: PaymentUpdate, db: Session = Depends(get_db)):
    """Partial update; sending only {"status": ...} is the approval workflow"""
    return PaymentService(db).update(payment_id, payload)
