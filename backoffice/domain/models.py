from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy import String, Text, BigInteger, Numeric, ForeignKey, Enum as SAEnum
from typing import Optional
import enum

class Base(DeclarativeBase):
    pass

class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"

class Account(Base):
    __tablename__ = "accounts"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200))
    address: Mapped[str] = mapped_column(String(500))
    phone_number: Mapped[str] = mapped_column(String(50))
    bank_account_number: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    payments: Mapped[list["Payment"]] = relationship("Payment", back_populates="account")

class Payment(Base):
    __tablename__ = "payments"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    amount: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False))
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[PaymentStatus] = mapped_column(
        SAEnum(PaymentStatus, name="payment_status", native_enum=False, length=20),
        default=PaymentStatus.PENDING,
    )
    # Set once at creation; never part of an update
    account_id: Mapped[int] = mapped_column(ForeignKey("accounts.id", ondelete="RESTRICT"), index=True)
    recipient_name: Mapped[str] = mapped_column(String(200))
    recipient_bank_name: Mapped[str] = mapped_column(String(200))
    recipient_account_number: Mapped[str] = mapped_column(String(50))
    account: Mapped[Account] = relationship("Account", back_populates="payments")
