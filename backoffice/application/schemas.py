from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Generic, Optional, TypeVar
from backoffice.domain.models import PaymentStatus

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 1000

# Column limits: BIGINT for bank account numbers, NUMERIC(12, 2) for amounts
MAX_BANK_ACCOUNT_NUMBER = 2 ** 63 - 1
MAX_AMOUNT = 10 ** 10

T = TypeVar("T")

class CamelModel(BaseModel):
    """snake_case in Python, camelCase on the wire; either spelling accepted on input"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

def _reject_null(value):
    if value is None:
        raise ValueError("may not be null")
    return value

class Page(BaseModel, Generic[T]):
    data: list[T]
    total: int

class AccountCreate(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    address: str = Field(min_length=1, max_length=500)
    phone_number: str = Field(min_length=1, max_length=50)
    bank_account_number: Optional[int] = Field(None, ge=0, le=MAX_BANK_ACCOUNT_NUMBER)

class AccountUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    address: Optional[str] = Field(None, min_length=1, max_length=500)
    phone_number: Optional[str] = Field(None, min_length=1, max_length=50)
    bank_account_number: Optional[int] = Field(None, ge=0, le=MAX_BANK_ACCOUNT_NUMBER)

    @field_validator("name", "address", "phone_number", mode="before")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)

class AccountRead(CamelModel):
    id: int
    name: str
    address: str
    phone_number: str
    bank_account_number: Optional[int] = None

class PaymentCreate(CamelModel):
    amount: float = Field(gt=-MAX_AMOUNT, lt=MAX_AMOUNT, allow_inf_nan=False)
    notes: Optional[str] = None
    status: PaymentStatus = PaymentStatus.PENDING
    recipient_name: str = Field(min_length=1, max_length=200)
    recipient_bank_name: str = Field(min_length=1, max_length=200)
    recipient_account_number: str = Field(min_length=1, max_length=50)

class PaymentUpdate(CamelModel):
    """Merge patch; accountId is fixed at creation and not accepted here"""
    amount: Optional[float] = Field(None, gt=-MAX_AMOUNT, lt=MAX_AMOUNT, allow_inf_nan=False)
    notes: Optional[str] = None
    status: Optional[PaymentStatus] = None
    recipient_name: Optional[str] = Field(None, min_length=1, max_length=200)
    recipient_bank_name: Optional[str] = Field(None, min_length=1, max_length=200)
    recipient_account_number: Optional[str] = Field(None, min_length=1, max_length=50)

    @field_validator(
        "amount", "status", "recipient_name", "recipient_bank_name", "recipient_account_number",
        mode="before",
    )
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)

class PaymentRead(CamelModel):
    id: int
    amount: float
    notes: Optional[str] = None
    status: PaymentStatus
    account_id: int
    recipient_name: str
    recipient_bank_name: str
    recipient_account_number: str
    account: Optional[AccountRead] = None
