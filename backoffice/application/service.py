from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload
from typing import Optional
from backoffice.core import get_logger
from backoffice.domain.models import Account, Payment
from .errors import NotFoundError
from .schemas import (
    AccountCreate, AccountRead, AccountUpdate,
    PaymentCreate, PaymentRead, PaymentUpdate, Page,
)

logger = get_logger(__name__)

class AccountService:
    def __init__(self, db: Session):
        self.db = db

    def list(self, skip: int = 0, take: int = 10) -> Page[AccountRead]:
        accounts = self.db.scalars(
            select(Account).order_by(Account.id).offset(skip).limit(take)
        ).all()
        return Page[AccountRead](
            data=[AccountRead.model_validate(a) for a in accounts],
            total=self.count(),
        )

    def count(self) -> int:
        return self.db.scalar(select(func.count()).select_from(Account))

    def get(self, account_id: int) -> Optional[Account]:
        return self.db.get(Account, account_id)

    def create(self, data: AccountCreate) -> Account:
        obj = Account(**data.model_dump())
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        logger.info(f"Account created: {obj.id}", extra={'extra_fields': {'account_id': obj.id}})
        return obj

    def update(self, account_id: int, data: AccountUpdate) -> Account:
        account = self.get(account_id)
        if not account:
            raise NotFoundError("Account", account_id)

        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(account, field, value)

        self.db.commit()
        self.db.refresh(account)
        logger.info(
            f"Account updated: {account_id}",
            extra={'extra_fields': {'account_id': account_id, 'fields': sorted(changes)}}
        )
        return account

class PaymentService:
    def __init__(self, db: Session):
        self.db = db

    def _filtered(self, stmt, account_id: Optional[int]):
        if account_id is not None:
            stmt = stmt.where(Payment.account_id == account_id)
        return stmt

    def list(self, skip: int = 0, take: int = 10, account_id: Optional[int] = None) -> Page[PaymentRead]:
        stmt = self._filtered(
            select(Payment).options(selectinload(Payment.account)),
            account_id,
        )
        payments = self.db.scalars(stmt.order_by(Payment.id).offset(skip).limit(take)).all()
        # total honours the same filter as the page
        return Page[PaymentRead](
            data=[PaymentRead.model_validate(p) for p in payments],
            total=self.count(account_id),
        )

    def count(self, account_id: Optional[int] = None) -> int:
        stmt = self._filtered(select(func.count()).select_from(Payment), account_id)
        return self.db.scalar(stmt)

    def get(self, payment_id: int) -> Optional[Payment]:
        return self.db.get(Payment, payment_id, options=[selectinload(Payment.account)])

    def create(self, account_id: int, data: PaymentCreate) -> Payment:
        if self.db.get(Account, account_id) is None:
            raise NotFoundError("Account", account_id)

        obj = Payment(**data.model_dump(), account_id=account_id)
        self.db.add(obj)
        try:
            self.db.commit()
        except IntegrityError:
            # the account vanished between the check and the insert
            self.db.rollback()
            raise
        self.db.refresh(obj)
        logger.info(
            f"Payment created: {obj.id}",
            extra={'extra_fields': {'payment_id': obj.id, 'account_id': account_id, 'status': obj.status.value}}
        )
        return obj

    def update(self, payment_id: int, data: PaymentUpdate) -> Payment:
        payment = self.get(payment_id)
        if not payment:
            raise NotFoundError("Payment", payment_id)

        # Status is a plain overwrite in either direction
        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(payment, field, value)

        self.db.commit()
        self.db.refresh(payment)
        logger.info(
            f"Payment updated: {payment_id}",
            extra={'extra_fields': {'payment_id': payment_id, 'fields': sorted(changes), 'status': payment.status.value}}
        )
        return payment
