"""
Account and payment forms of the admin UI.

A form keeps a local draft keyed by the API's camelCase field names,
validates required fields before anything is sent, and on a successful
submit clears the draft and closes. Server errors go to the notifier and
leave the draft untouched.
"""

from typing import Any, Dict, List, Optional
from backoffice.core import get_logger
from .client import AdminApiClient, ApiError
from .notifications import Notifier

logger = get_logger(__name__)

def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()

def _parse_int(value: Any) -> Optional[int]:
    text = _text(value)
    if not text:
        return None
    return int(text, 10)

class AccountForm:
    REQUIRED = {
        "name": "Name is required",
        "address": "Address is required",
        "phoneNumber": "Phone number is required",
    }

    def __init__(self, client: AdminApiClient, notifier: Notifier, account: Optional[Dict[str, Any]] = None):
        self.client = client
        self.notifier = notifier
        self.account = account
        self.draft = self._initial_draft()
        self.errors: Dict[str, str] = {}
        self.closed = False

    def _initial_draft(self) -> Dict[str, Any]:
        if self.account:
            return {
                "name": self.account.get("name", ""),
                "address": self.account.get("address", ""),
                "phoneNumber": self.account.get("phoneNumber", ""),
                "bankAccountNumber": self.account.get("bankAccountNumber"),
            }
        return {"name": "", "address": "", "phoneNumber": "", "bankAccountNumber": None}

    @property
    def is_edit(self) -> bool:
        return self.account is not None

    def set_field(self, field: str, value: Any) -> None:
        if field not in self.draft:
            raise KeyError(field)
        self.draft[field] = value
        self.errors.pop(field, None)

    def fill(self, values: Dict[str, Any]) -> None:
        for field, value in values.items():
            if field in self.draft:
                self.set_field(field, value)

    def validate(self) -> Dict[str, str]:
        errors = {
            field: message
            for field, message in self.REQUIRED.items()
            if not _text(self.draft.get(field))
        }
        try:
            bank_account_number = _parse_int(self.draft.get("bankAccountNumber"))
        except ValueError:
            errors["bankAccountNumber"] = "Bank account number must be a whole number"
        else:
            if bank_account_number is not None and bank_account_number <= 0:
                errors["bankAccountNumber"] = "Bank account number must be positive"
        self.errors = errors
        return errors

    def payload(self) -> Dict[str, Any]:
        data = {field: _text(self.draft[field]) for field in self.REQUIRED}
        bank_account_number = _parse_int(self.draft.get("bankAccountNumber"))
        # a blank number on an existing account clears it
        if bank_account_number is not None or self.is_edit:
            data["bankAccountNumber"] = bank_account_number
        return data

    async def submit(self) -> Optional[Dict[str, Any]]:
        if self.validate():
            return None

        action = "update" if self.is_edit else "create"
        try:
            if self.is_edit:
                saved = await self.client.update_account(self.account["id"], self.payload())
            else:
                saved = await self.client.create_account(self.payload())
        except ApiError as e:
            self.notifier.notify(f"Failed to {action} account: {e.message}")
            return None

        if self.is_edit:
            self.account = saved
            self.notifier.notify("Account updated successfully!")
        else:
            self.notifier.notify("Account created successfully!")
        self.draft = self._initial_draft()
        self.closed = True
        return saved

class PaymentForm:
    REQUIRED = {
        "accountId": "Please select an account",
        "recipientName": "Recipient name is required",
        "recipientBankName": "Recipient bank name is required",
        "recipientAccountNumber": "Recipient account number is required",
    }

    # The selection list is loaded in one request, capped server-side
    ACCOUNT_CHOICES_LIMIT = 1000

    def __init__(self, client: AdminApiClient, notifier: Notifier, account_id: Optional[int] = None):
        self.client = client
        self.notifier = notifier
        # An account fixed by the page context cannot be changed in the form
        self.account_id = account_id
        self.accounts: List[Dict[str, Any]] = []
        self.accounts_loaded = False
        self.draft = self._initial_draft()
        self.errors: Dict[str, str] = {}
        self.closed = False

    @property
    def account_locked(self) -> bool:
        return self.account_id is not None

    def _initial_draft(self) -> Dict[str, Any]:
        return {
            "accountId": self.account_id,
            "amount": 0,
            "recipientName": "",
            "recipientBankName": "",
            "recipientAccountNumber": "",
            "notes": "",
        }

    async def load_accounts(self) -> List[Dict[str, Any]]:
        try:
            page = await self.client.list_accounts(skip=0, take=self.ACCOUNT_CHOICES_LIMIT)
        except ApiError as e:
            logger.warning(f"Loading account choices failed: {e.message}")
            self.notifier.notify("Failed to load accounts")
        else:
            self.accounts = page["data"]
        self.accounts_loaded = True
        return self.accounts

    def set_field(self, field: str, value: Any) -> None:
        if field not in self.draft:
            raise KeyError(field)
        if field == "accountId" and self.account_locked:
            return
        self.draft[field] = value
        self.errors.pop(field, None)

    def fill(self, values: Dict[str, Any]) -> None:
        for field, value in values.items():
            if field in self.draft:
                self.set_field(field, value)

    def validate(self) -> Dict[str, str]:
        errors = {
            field: message
            for field, message in self.REQUIRED.items()
            if not _text(self.draft.get(field))
        }
        if "accountId" not in errors:
            try:
                _parse_int(self.draft["accountId"])
            except ValueError:
                errors["accountId"] = "Please select an account"
        try:
            float(_text(self.draft.get("amount")))
        except ValueError:
            errors["amount"] = "Amount must be a number"
        self.errors = errors
        return errors

    def payload(self) -> Dict[str, Any]:
        data = {
            "amount": float(_text(self.draft["amount"])),
            "recipientName": _text(self.draft["recipientName"]),
            "recipientBankName": _text(self.draft["recipientBankName"]),
            "recipientAccountNumber": _text(self.draft["recipientAccountNumber"]),
        }
        notes = _text(self.draft.get("notes"))
        if notes:
            data["notes"] = notes
        return data

    async def submit(self) -> Optional[Dict[str, Any]]:
        if self.validate():
            return None

        account_id = _parse_int(self.draft["accountId"])
        try:
            created = await self.client.create_payment(account_id, self.payload())
        except ApiError as e:
            self.notifier.notify(f"Failed to create payment: {e.message}")
            return None

        self.draft = self._initial_draft()
        self.closed = True
        self.notifier.notify("Payment created successfully!")
        return created

async def set_payment_status(client: AdminApiClient, notifier: Notifier, payment_id: int, status: str) -> Optional[Dict[str, Any]]:
    """Row-level status control: PATCHes only the status field"""
    try:
        updated = await client.set_payment_status(payment_id, status)
    except ApiError as e:
        notifier.notify(f"Failed to update payment status: {e.message}")
        return None
    notifier.notify("Payment status updated successfully")
    return updated
