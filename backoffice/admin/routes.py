"""
Admin UI pages and the JSON endpoints their forms post to.

Pages read through the REST API with AdminApiClient, never the database,
and every failure ends up as a message in the requesting client's
notifier, shown on its next rendered page.
"""

from typing import Any, Dict, Optional
from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from backoffice.core_settings import get_settings
from backoffice.application.schemas import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from .client import AdminApiClient, ApiError
from .forms import AccountForm, PaymentForm, set_payment_status
from .notifications import AdminSession, Notifier, get_admin_session
from .render import (
    account_link, render_account_form, render_page, render_payment_form, render_table, status_select,
)
from .table import Column, PaginatedTable, PaginationState

router = APIRouter(prefix="/admin", tags=["admin"], include_in_schema=False)

ACCOUNT_COLUMNS = [
    Column("id", "ID"),
    Column("name", "Name"),
    Column("address", "Address"),
    Column("phoneNumber", "Phone Number"),
    Column("bankAccountNumber", "Bank Account Number"),
    Column("actions", "Actions", value=account_link),
]

PAYMENT_COLUMNS = [
    Column("id", "ID"),
    Column("amount", "Amount"),
    Column("notes", "Notes"),
    Column("status", "Status", value=status_select),
    Column("account", "Account Name", value=lambda row: (row.get("account") or {}).get("name")),
    Column("recipientName", "Recipient's Name"),
    Column("recipientBankName", "Recipient's Bank Name"),
    Column("recipientAccountNumber", "Recipient's Account Number"),
]

def get_api_client() -> AdminApiClient:
    settings = get_settings()
    return AdminApiClient(settings.API_BASE_URL, timeout=settings.HTTP_TIMEOUT_SEC)

def _pagination(page: int, size: int) -> PaginationState:
    return PaginationState(page=page, take=size)

def _html(title: str, content: str, session: AdminSession) -> HTMLResponse:
    return session.attach(HTMLResponse(
        content=render_page(title, content, session.notifier.consume()),
        headers={"Cache-Control": "no-store"},
    ))

def _json(content: Dict[str, Any], session: AdminSession) -> JSONResponse:
    return session.attach(JSONResponse(content=content))

def _form_result(form, saved: Optional[Dict[str, Any]], session: AdminSession) -> JSONResponse:
    if saved is not None:
        # this client's next page render shows the success message
        return _json({"success": True, "data": saved}, session)
    return _json({"success": False, "errors": form.errors, "message": session.notifier.consume()}, session)

async def _payments_table(client: AdminApiClient, notifier: Notifier, page: int, size: int,
                          account_id: Optional[int] = None) -> PaginatedTable:
    async def fetch(state: PaginationState) -> Dict[str, Any]:
        return await client.list_payments(skip=state.skip, take=state.take, account_id=account_id)

    table = PaginatedTable(PAYMENT_COLUMNS, fetch, notifier, pagination=_pagination(page, size))
    await table.load()
    return table

@router.get("")
async def admin_root():
    return RedirectResponse(url="/admin/accounts")


@router.get("/accounts", response_class=HTMLResponse)
async def accounts_page(
    page: int = Query(0, ge=0),
    size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    client: AdminApiClient = Depends(get_api_client),
    session: AdminSession = Depends(get_admin_session),
):
    async def fetch(state: PaginationState) -> Dict[str, Any]:
        return await client.list_accounts(skip=state.skip, take=state.take)

    table = PaginatedTable(ACCOUNT_COLUMNS, fetch, session.notifier, pagination=_pagination(page, size))
    await table.load()
    form = AccountForm(client, session.notifier)
    content = render_account_form(form, "/admin/api/accounts") + render_table(table, "/admin/accounts")
    return _html("Accounts", content, session)

@router.get("/accounts/{account_id}", response_class=HTMLResponse)
async def account_page(
    account_id: int,
    page: int = Query(0, ge=0),
    size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    client: AdminApiClient = Depends(get_api_client),
    session: AdminSession = Depends(get_admin_session),
):
    notifier = session.notifier
    try:
        account = await client.get_account(account_id)
    except ApiError as e:
        notifier.notify(f"Failed to load account: {e.message}")
        return _html("Account", '<p><a href="/admin/accounts">Back to accounts</a></p>', session)

    form = AccountForm(client, notifier, account=account)
    table = await _payments_table(client, notifier, page, size, account_id=account_id)
    payment_form = PaymentForm(client, notifier, account_id=account_id)
    await payment_form.load_accounts()
    content = (
        render_account_form(form, f"/admin/api/accounts/{account_id}")
        + render_payment_form(payment_form, "/admin/api/payments")
        + render_table(table, f"/admin/accounts/{account_id}")
    )
    return _html(f"Account #{account_id}", content, session)

@router.get("/payments", response_class=HTMLResponse)
async def payments_page(
    page: int = Query(0, ge=0),
    size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    client: AdminApiClient = Depends(get_api_client),
    session: AdminSession = Depends(get_admin_session),
):
    table = await _payments_table(client, session.notifier, page, size)
    form = PaymentForm(client, session.notifier)
    await form.load_accounts()
    content = render_payment_form(form, "/admin/api/payments") + render_table(table, "/admin/payments")
    return _html("Payments", content, session)

@router.post("/api/accounts")
async def submit_account(
    values: Dict[str, Any] = Body(...),
    client: AdminApiClient = Depends(get_api_client),
    session: AdminSession = Depends(get_admin_session),
):
    form = AccountForm(client, session.notifier)
    form.fill(values)
    return _form_result(form, await form.submit(), session)

@router.patch("/api/accounts/{account_id}")
async def submit_account_edit(
    account_id: int,
    values: Dict[str, Any] = Body(...),
    client: AdminApiClient = Depends(get_api_client),
    session: AdminSession = Depends(get_admin_session),
):
    try:
        account = await client.get_account(account_id)
    except ApiError as e:
        return _json({"success": False, "errors": {}, "message": f"Failed to load account: {e.message}"}, session)

    form = AccountForm(client, session.notifier, account=account)
    form.fill(values)
    return _form_result(form, await form.submit(), session)

@router.post("/api/payments")
async def submit_payment(
    values: Dict[str, Any] = Body(...),
    client: AdminApiClient = Depends(get_api_client),
    session: AdminSession = Depends(get_admin_session),
):
    form = PaymentForm(client, session.notifier)
    form.fill(values)
    return _form_result(form, await form.submit(), session)

@router.patch("/api/payments/{payment_id}/status")
async def change_payment_status(
    payment_id: int,
    status: str = Body(..., embed=True),
    client: AdminApiClient = Depends(get_api_client),
    session: AdminSession = Depends(get_admin_session),
):
    updated = await set_payment_status(client, session.notifier, payment_id, status)
    if updated is None:
        return _json({"success": False, "message": session.notifier.consume()}, session)
    return _json({"success": True, "data": updated}, session)
