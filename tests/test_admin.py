import asyncio
import httpx
import pytest
from fastapi.testclient import TestClient
from backoffice.main import app
from backoffice.admin.client import AdminApiClient, ApiError
from backoffice.admin.forms import AccountForm, PaymentForm, set_payment_status
from backoffice.admin.notifications import CLIENT_COOKIE, Notifier, NotifierRegistry
from backoffice.admin.table import Column, PaginatedTable, PaginationState
from conftest import create_account, create_payment

def test_notifier_keeps_only_latest_message():
    notifier = Notifier()
    notifier.notify("first")
    notifier.notify("second")
    assert notifier.consume() == "second"
    assert notifier.consume() is None

def test_registry_keeps_one_notifier_per_client():
    registry = NotifierRegistry(max_clients=2)
    first = registry.for_client("a")
    first.notify("for a")
    assert registry.for_client("b").peek() is None
    assert registry.for_client("a") is first

    # "b" is now the least recently seen client
    registry.for_client("c")
    assert registry.for_client("a").peek() == "for a"
    assert "b" not in registry

def test_pagination_state_skip():
    assert PaginationState(page=3, take=25).skip == 75

def test_table_loads_page():
    async def fetch(state):
        return {"data": [{"id": state.skip + 1}], "total": 42}

    table = PaginatedTable([Column("id", "ID")], fetch, Notifier(), pagination=PaginationState(page=2, take=5))
    assert asyncio.run(table.load()) is True
    assert table.rows == [{"id": 11}]
    assert table.total == 42
    assert table.page_count == 9
    assert table.loading is False

def test_table_fetch_failure_keeps_rows_and_notifies():
    notifier = Notifier()
    responses = [{"data": [{"id": 1}], "total": 1}]

    async def fetch(state):
        if responses:
            return responses.pop()
        raise ApiError("boom", 500)

    table = PaginatedTable([Column("id", "ID")], fetch, notifier)
    asyncio.run(table.load())
    table.trigger_refresh()
    assert asyncio.run(table.load()) is False
    assert table.rows == [{"id": 1}]
    assert notifier.consume() == "Failed to fetch: boom"

def test_table_discards_stale_response():
    async def scenario():
        gate = asyncio.Event()

        async def fetch(state):
            if state.page == 0:
                await gate.wait()
                return {"data": [{"id": 1}], "total": 30}
            return {"data": [{"id": 11}], "total": 30}

        table = PaginatedTable([Column("id", "ID")], fetch, Notifier())
        slow = asyncio.create_task(table.load())
        await asyncio.sleep(0)
        table.set_page(1)
        assert await table.load() is True
        gate.set()
        assert await slow is False
        return table

    table = asyncio.run(scenario())
    assert table.rows == [{"id": 11}]
    assert table.pagination.page == 1

def test_column_value_getter():
    column = Column("account", "Account Name", value=lambda row: row["account"]["name"])
    assert column.cell({"account": {"name": "Jane"}}) == "Jane"

def test_client_flattens_validation_errors():
    def handler(request):
        return httpx.Response(422, json={"detail": [{"loc": ["body", "name"], "msg": "Field required"}]})

    client = AdminApiClient("http://api", transport=httpx.MockTransport(handler))
    with pytest.raises(ApiError) as excinfo:
        asyncio.run(client.create_account({}))
    assert excinfo.value.message == "name: Field required"
    assert excinfo.value.status_code == 422

def test_client_reports_unreachable_api():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = AdminApiClient("http://api", transport=httpx.MockTransport(handler))
    with pytest.raises(ApiError) as excinfo:
        asyncio.run(client.list_accounts())
    assert "unreachable" in excinfo.value.message

def test_account_form_required_fields(api_client):
    form = AccountForm(api_client, Notifier())
    form.set_field("name", "  ")
    form.set_field("bankAccountNumber", "-5")
    errors = form.validate()
    assert errors == {
        "name": "Name is required",
        "address": "Address is required",
        "phoneNumber": "Phone number is required",
        "bankAccountNumber": "Bank account number must be positive",
    }
    form.set_field("name", "Jane")
    assert "name" not in form.errors

def test_account_form_does_not_submit_invalid_draft(client, api_client):
    notifier = Notifier()
    form = AccountForm(api_client, notifier)
    assert asyncio.run(form.submit()) is None
    assert form.closed is False
    assert notifier.peek() is None
    assert client.get("/accounts").json()["total"] == 0

def test_account_form_creates_and_clears(client, api_client):
    notifier = Notifier()
    form = AccountForm(api_client, notifier)
    form.fill({"name": " Jane ", "address": "Main St", "phoneNumber": "555", "bankAccountNumber": "1234"})

    created = asyncio.run(form.submit())
    assert created["name"] == "Jane"
    assert created["bankAccountNumber"] == 1234
    assert form.closed is True
    assert form.draft["name"] == ""
    assert notifier.consume() == "Account created successfully!"
    assert client.get("/accounts").json()["total"] == 1

def test_account_form_edits_existing_account(client, api_client):
    account = create_account(client)
    notifier = Notifier()
    form = AccountForm(api_client, notifier, account=account)
    assert form.draft["name"] == "A"
    form.set_field("address", "New address")

    asyncio.run(form.submit())
    assert client.get(f"/accounts/{account['id']}").json()["address"] == "New address"
    assert notifier.consume() == "Account updated successfully!"

def test_payment_form_loads_accounts(client, api_client):
    for i in range(12):
        create_account(client, name=f"Account {i}")
    form = PaymentForm(api_client, Notifier())
    accounts = asyncio.run(form.load_accounts())
    assert len(accounts) == 12

def test_payment_form_locked_account(api_client):
    form = PaymentForm(api_client, Notifier(), account_id=3)
    form.set_field("accountId", 9)
    assert form.draft["accountId"] == 3

def test_payment_form_validation(api_client):
    form = PaymentForm(api_client, Notifier())
    form.set_field("amount", "ten")
    errors = form.validate()
    assert errors["accountId"] == "Please select an account"
    assert errors["amount"] == "Amount must be a number"
    assert errors["recipientName"] == "Recipient name is required"

def test_payment_form_surfaces_server_error(api_client):
    notifier = Notifier()
    form = PaymentForm(api_client, notifier)
    form.fill({"accountId": "77", "amount": "10", "recipientName": "R", "recipientBankName": "B",
               "recipientAccountNumber": "9"})

    assert asyncio.run(form.submit()) is None
    assert form.closed is False
    assert form.draft["recipientName"] == "R"
    assert notifier.consume() == "Failed to create payment: Account not found"

def test_payment_form_creates_payment(client, api_client):
    create_account(client)
    notifier = Notifier()
    form = PaymentForm(api_client, notifier)
    form.fill({"accountId": "1", "amount": "19.99", "recipientName": "R", "recipientBankName": "B",
               "recipientAccountNumber": "9", "notes": "  "})

    created = asyncio.run(form.submit())
    assert created["amount"] == 19.99
    assert created["notes"] is None
    assert created["status"] == "PENDING"
    assert form.closed is True
    assert notifier.consume() == "Payment created successfully!"

def test_set_payment_status(client, api_client):
    create_account(client)
    create_payment(client, 1)
    notifier = Notifier()

    updated = asyncio.run(set_payment_status(api_client, notifier, 1, "APPROVED"))
    assert updated["status"] == "APPROVED"
    assert notifier.consume() == "Payment status updated successfully"

    assert asyncio.run(set_payment_status(api_client, notifier, 99, "APPROVED")) is None
    assert notifier.consume() == "Failed to update payment status: Payment not found"

def test_accounts_page_renders_table(admin_client):
    for i in range(12):
        create_account(admin_client, name=f"Holder {i}")

    resp = admin_client.get("/admin/accounts", params={"page": 1, "size": 5})
    assert resp.status_code == 200
    assert "Holder 5" in resp.text
    assert "Holder 4" not in resp.text
    assert "6&ndash;10 of 12" in resp.text
    assert 'href="/admin/accounts/6"' in resp.text

def test_accounts_page_escapes_values(admin_client):
    create_account(admin_client, name="<script>alert(1)</script>")
    resp = admin_client.get("/admin/accounts")
    assert "<script>alert(1)</script>" not in resp.text
    assert "&lt;script&gt;" in resp.text

def test_account_page_shows_only_its_payments(admin_client):
    create_account(admin_client)
    create_account(admin_client, name="Other")
    create_payment(admin_client, 1, recipientName="Mine")
    create_payment(admin_client, 2, recipientName="Theirs")

    resp = admin_client.get("/admin/accounts/1")
    assert resp.status_code == 200
    assert "Mine" in resp.text
    assert "Theirs" not in resp.text
    assert "1&ndash;1 of 1" in resp.text

def test_missing_account_page_shows_notification(admin_client):
    resp = admin_client.get("/admin/accounts/404")
    assert resp.status_code == 200
    assert "Failed to load account: Account not found" in resp.text

def test_payments_page_has_status_control(admin_client):
    create_account(admin_client)
    create_payment(admin_client, 1)
    resp = admin_client.get("/admin/payments")
    assert resp.status_code == 200
    assert 'onchange="setStatus(this, 1)"' in resp.text
    assert '<option value="PENDING" selected>' in resp.text

def test_admin_account_submission(admin_client):
    resp = admin_client.post("/admin/api/accounts", json={"name": "", "address": "X", "phoneNumber": "1"})
    assert resp.json() == {"success": False, "errors": {"name": "Name is required"}, "message": None}

    resp = admin_client.post("/admin/api/accounts", json={"name": "N", "address": "X", "phoneNumber": "1",
                                                          "bankAccountNumber": ""})
    assert resp.json()["success"] is True
    # success message waits for the next page render
    assert "Account created successfully!" in admin_client.get("/admin/accounts").text

def test_admin_payment_status_change(admin_client):
    create_account(admin_client)
    create_payment(admin_client, 1)

    resp = admin_client.patch("/admin/api/payments/1/status", json={"status": "APPROVED"})
    assert resp.json()["success"] is True
    assert admin_client.get("/payments/1").json()["status"] == "APPROVED"

    resp = admin_client.patch("/admin/api/payments/1/status", json={"status": "LOST"})
    assert resp.json()["success"] is False
    assert resp.json()["message"].startswith("Failed to update payment status: status:")

def test_messages_stay_with_the_client_that_caused_them(admin_client):
    other = TestClient(app)

    resp = admin_client.post("/admin/api/accounts", json={"name": "N", "address": "X", "phoneNumber": "1"})
    assert resp.json()["success"] is True
    assert CLIENT_COOKIE in resp.cookies

    assert "Account created successfully!" not in other.get("/admin/payments").text
    assert "Account created successfully!" in admin_client.get("/admin/payments").text

    other.patch("/admin/api/payments/9/status", json={"status": "APPROVED"})
    other.get("/admin/accounts")
    assert "Failed to update payment status" not in admin_client.get("/admin/accounts").text

def test_account_form_clears_bank_account_number(client, api_client):
    account = create_account(client)
    form = AccountForm(api_client, Notifier(), account=account)
    form.set_field("bankAccountNumber", "")

    saved = asyncio.run(form.submit())
    assert saved["bankAccountNumber"] is None
    assert client.get(f"/accounts/{account['id']}").json()["bankAccountNumber"] is None

def test_new_account_payload_omits_blank_bank_account_number(api_client):
    form = AccountForm(api_client, Notifier())
    form.fill({"name": "N", "address": "X", "phoneNumber": "1", "bankAccountNumber": " "})
    assert "bankAccountNumber" not in form.payload()
