"""HTML rendering for the admin pages."""

from functools import lru_cache
from html import escape
from pathlib import Path
from string import Template
from typing import Any, Dict, Optional
from urllib.parse import urlencode
from backoffice.domain.models import PaymentStatus
from .forms import AccountForm, PaymentForm
from .table import PAGE_SIZE_OPTIONS, PaginatedTable

TEMPLATE_DIR = Path(__file__).parent / "templates"

class SafeHtml(str):
    """Markup that is inserted into a page without escaping"""

def _e(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, SafeHtml):
        return value
    return escape(str(value))

@lru_cache
def _layout() -> Template:
    return Template((TEMPLATE_DIR / "layout.html").read_text(encoding="utf-8"))

def render_page(title: str, content: str, notification: Optional[str] = None) -> str:
    return _layout().substitute(title=_e(title), content=content, notification=_e(notification))

def _page_link(base_url: str, page: int, take: int, label: str) -> str:
    query = urlencode({"page": page, "size": take})
    return f'<a href="{_e(base_url)}?{query}">{_e(label)}</a>'

def render_table(table: PaginatedTable, base_url: str) -> str:
    head = "".join(f"<th>{_e(c.header)}</th>" for c in table.columns)
    if table.rows:
        body = "".join(
            "<tr>" + "".join(f"<td>{_e(c.cell(row))}</td>" for c in table.columns) + "</tr>"
            for row in table.rows
        )
    else:
        body = f'<tr><td colspan="{len(table.columns)}">No rows</td></tr>'

    state = table.pagination
    first = state.skip + 1 if table.rows else 0
    last = state.skip + len(table.rows)
    nav = [f"<span>{first}&ndash;{last} of {table.total}</span>"]
    if state.page > 0:
        nav.append(_page_link(base_url, state.page - 1, state.take, "Previous"))
    if state.page + 1 < table.page_count:
        nav.append(_page_link(base_url, state.page + 1, state.take, "Next"))
    nav.append("<span>Rows per page:</span>")
    for size in PAGE_SIZE_OPTIONS:
        if size == state.take:
            nav.append(f"<strong>{size}</strong>")
        else:
            nav.append(_page_link(base_url, 0, size, str(size)))

    return (
        f'<table><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>'
        f'<div class="pagination">{"".join(nav)}</div>'
    )

def account_link(row: Dict[str, Any]) -> SafeHtml:
    return SafeHtml(f'<a href="/admin/accounts/{int(row["id"])}">Edit</a>')

def status_select(row: Dict[str, Any]) -> SafeHtml:
    options = "".join(
        f'<option value="{s.value}"{" selected" if row.get("status") == s.value else ""}>{s.value.title()}</option>'
        for s in PaymentStatus
    )
    return SafeHtml(f'<select onchange="setStatus(this, {int(row["id"])})">{options}</select>')

def _field(label: str, name: str, value: Any, error: Optional[str], input_type: str = "text", required: bool = True) -> str:
    required_attr = " required" if required else ""
    step_attr = ' step="any"' if input_type == "number" else ""
    return (
        f'<div class="form-group">'
        f'<label class="form-label" for="{name}">{_e(label)}</label>'
        f'<input class="form-input" id="{name}" name="{name}" type="{input_type}" value="{_e(value)}"{step_attr}{required_attr}>'
        f'<small class="field-error" data-error-for="{name}">{_e(error)}</small>'
        f'</div>'
    )

def _form(url: str, method: str, title: str, fields: str, submit_label: str) -> str:
    return (
        f'<form class="card" data-url="{_e(url)}" data-method="{method}" onsubmit="return submitForm(this) && false">'
        f'<h3>{_e(title)}</h3>{fields}<button type="submit">{_e(submit_label)}</button></form>'
    )

def render_account_form(form: AccountForm, url: str) -> str:
    draft, errors = form.draft, form.errors
    fields = (
        '<div class="form-row">'
        + _field("Name", "name", draft["name"], errors.get("name"))
        + _field("Address", "address", draft["address"], errors.get("address"))
        + _field("Phone Number", "phoneNumber", draft["phoneNumber"], errors.get("phoneNumber"))
        + _field("Bank Account Number", "bankAccountNumber", draft["bankAccountNumber"],
                 errors.get("bankAccountNumber"), input_type="number", required=False)
        + '</div>'
    )
    if form.is_edit:
        return _form(url, "PATCH", "Edit Account", fields, "Save Account")
    return _form(url, "POST", "Create New Account", fields, "Create Account")

def render_payment_form(form: PaymentForm, url: str) -> str:
    draft, errors = form.draft, form.errors
    selected = str(draft["accountId"]) if draft["accountId"] is not None else ""
    options = ['<option value="">Select an account</option>']
    for account in form.accounts:
        value = str(account["id"])
        label = f'{account["name"]} - {account.get("bankAccountNumber") or ""}'
        options.append(f'<option value="{_e(value)}"{" selected" if value == selected else ""}>{_e(label)}</option>')
    disabled = " disabled" if form.account_locked else ""
    account_select = (
        f'<div class="form-group"><label class="form-label" for="accountId">Account</label>'
        f'<select class="form-input" id="accountId" name="accountId" required{disabled}>{"".join(options)}</select>'
        + (f'<input type="hidden" name="accountId" value="{_e(selected)}">' if form.account_locked else "")
        + f'<small class="field-error" data-error-for="accountId">{_e(errors.get("accountId"))}</small></div>'
    )
    fields = (
        account_select
        + _field("Payment Amount", "amount", draft["amount"], errors.get("amount"), input_type="number")
        + '<div class="form-row">'
        + _field("Recipient Name", "recipientName", draft["recipientName"], errors.get("recipientName"))
        + _field("Recipient Bank Name", "recipientBankName", draft["recipientBankName"], errors.get("recipientBankName"))
        + _field("Recipient Account Number", "recipientAccountNumber", draft["recipientAccountNumber"],
                 errors.get("recipientAccountNumber"))
        + '</div>'
        + _field("Notes", "notes", draft["notes"], errors.get("notes"), required=False)
    )
    return _form(url, "POST", "Create New Payment", fields, "Create Payment")
