import pytest
from backoffice.application.errors import NotFoundError
from backoffice.application.schemas import AccountCreate, AccountUpdate, PaymentCreate, PaymentUpdate
from backoffice.application.service import AccountService, PaymentService
from backoffice.domain.models import Payment, PaymentStatus

def _account(db, name="A"):
    return AccountService(db).create(
        AccountCreate(name=name, address="X", phone_number="1", bank_account_number=111)
    )

def _payment(db, account_id, amount=50.0):
    return PaymentService(db).create(account_id, PaymentCreate(
        amount=amount, recipient_name="R", recipient_bank_name="B", recipient_account_number="999",
    ))

def test_list_returns_at_most_take(db):
    for i in range(8):
        _account(db, name=f"Account {i}")
    service = AccountService(db)

    for skip in range(0, 10):
        for take in (1, 3, 5, 20):
            page = service.list(skip=skip, take=take)
            assert len(page.data) <= take
            assert len(page.data) == max(0, min(take, 8 - skip))
            assert page.total == 8

def test_count_matches_filter(db):
    first = _account(db)
    second = _account(db, name="B")
    _payment(db, first.id)
    _payment(db, second.id)
    _payment(db, second.id)

    service = PaymentService(db)
    assert service.count() == 3
    assert service.count(first.id) == 1
    assert service.count(second.id) == 2
    assert service.list(account_id=second.id, take=1).total == 2

def test_get_missing_returns_none(db):
    assert AccountService(db).get(1) is None
    assert PaymentService(db).get(1) is None

def test_create_payment_defaults_to_pending(db):
    account = _account(db)
    payment = _payment(db, account.id)
    assert payment.status is PaymentStatus.PENDING
    assert payment.account.name == "A"

def test_create_payment_for_missing_account(db):
    with pytest.raises(NotFoundError) as excinfo:
        _payment(db, 5)
    assert excinfo.value.entity == "Account"
    assert db.query(Payment).count() == 0

def test_update_applies_only_set_fields(db):
    account = _account(db)
    updated = AccountService(db).update(account.id, AccountUpdate(address="Y"))
    assert (updated.name, updated.address, updated.phone_number, updated.bank_account_number) == ("A", "Y", "1", 111)

def test_status_only_update_is_visible(db):
    account = _account(db)
    payment = _payment(db, account.id, amount=12.5)
    PaymentService(db).update(payment.id, PaymentUpdate(status=PaymentStatus.APPROVED))

    fetched = PaymentService(db).get(payment.id)
    assert fetched.status is PaymentStatus.APPROVED
    assert fetched.amount == 12.5

def test_update_missing_raises(db):
    with pytest.raises(NotFoundError):
        PaymentService(db).update(3, PaymentUpdate(notes="x"))
    with pytest.raises(NotFoundError):
        AccountService(db).update(3, AccountUpdate(name="x"))
