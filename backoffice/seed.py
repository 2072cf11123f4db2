"""Fill the database with demo accounts and payments: python -m backoffice.seed"""

import random
from typing import Optional
from sqlalchemy.orm import Session
from backoffice.core import setup_logging, get_logger
from backoffice.core_settings import get_settings
from backoffice.domain.models import Account, Payment, PaymentStatus
from backoffice.infrastructure.db import SessionLocal, init_models

NUMBER_OF_ACCOUNTS = 50
NUMBER_OF_PAYMENTS = 200

FIRST_NAMES = ["Ana", "Ben", "Chloe", "David", "Elena", "Farid", "Grace", "Hiro", "Ines", "Jonas", "Kira", "Luis", "Maya", "Noah"]
LAST_NAMES = ["Smith", "Garcia", "Okafor", "Novak", "Tanaka", "Rossi", "Dubois", "Kowalski", "Hansen", "Silva", "Nguyen", "Khan"]
STREETS = ["Main St", "Oak Ave", "Pine Rd", "Elm St", "Maple Dr", "Cedar Ln", "Harbor Way", "Mill Rd"]
BANK_WORDS = ["First", "United", "Coastal", "Summit", "Heritage", "Pioneer", "Metro", "Northern"]
NOTE_WORDS = ["invoice", "march", "supplier", "refund", "consulting", "rent", "hardware", "services", "quarterly", "deposit"]

logger = get_logger(__name__)

def _full_name(rng: random.Random) -> str:
    return f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}"

def _note(rng: random.Random) -> Optional[str]:
    if rng.random() > 0.7:
        return None
    return " ".join(rng.sample(NOTE_WORDS, k=4)).capitalize() + "."

def seed(db: Session, accounts: int = NUMBER_OF_ACCOUNTS, payments: int = NUMBER_OF_PAYMENTS, rng: Optional[random.Random] = None) -> None:
    rng = rng or random.Random()

    created = []
    for _ in range(accounts):
        account = Account(
            name=_full_name(rng),
            address=f"{rng.randint(1, 9999)} {rng.choice(STREETS)}",
            phone_number=f"+1{rng.randint(2000000000, 9999999999)}",
            bank_account_number=rng.randint(10000000, 99999999),
        )
        db.add(account)
        created.append(account)
    db.flush()
    logger.info(f"Created {len(created)} accounts")

    for _ in range(payments):
        account = rng.choice(created)
        db.add(Payment(
            amount=round(rng.uniform(10, 1000), 2),
            notes=_note(rng),
            status=rng.choice(list(PaymentStatus)),
            account_id=account.id,
            recipient_name=_full_name(rng),
            recipient_bank_name=f"{rng.choice(BANK_WORDS)} {rng.choice(LAST_NAMES)} Bank",
            recipient_account_number=str(rng.randint(10000000, 99999999)),
        ))
    db.commit()
    logger.info(f"Created {payments} payments")

def main():
    settings = get_settings()
    setup_logging(service_name=f"{settings.SERVICE_NAME}-seed", level=settings.LOG_LEVEL)
    init_models()
    with SessionLocal() as db:
        seed(db)

if __name__ == "__main__":
    main()
