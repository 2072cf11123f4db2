"""HTTP client the admin UI uses to talk to the REST API."""

from typing import Any, Dict, Optional
import httpx
from backoffice.core import get_logger

logger = get_logger(__name__)

class ApiError(Exception):
    """A failed API call; message is what the user gets to see"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)

def error_message(response: httpx.Response) -> str:
    """Flatten FastAPI's error body (string or validation list) into one line"""
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}: {response.text or response.reason_phrase}"

    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, str):
        return detail
    if isinstance(detail, list):
        parts = []
        for item in detail:
            loc = item.get("loc") or []
            field = loc[-1] if loc else "request"
            parts.append(f"{field}: {item.get('msg', 'invalid')}")
        return "; ".join(parts)
    return f"HTTP {response.status_code}"

class AdminApiClient:
    def __init__(self, base_url: str, timeout: float = 5.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url
        self.timeout = timeout
        self.transport = transport

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.request(method, path, **kwargs)
            except httpx.TimeoutException:
                logger.warning(f"API timeout: {method} {path}")
                raise ApiError("Request timed out")
            except httpx.HTTPError as e:
                logger.warning(f"API unreachable: {method} {path}: {e}")
                raise ApiError(f"API unreachable: {e}")

        if response.is_error:
            raise ApiError(error_message(response), response.status_code)
        return response.json()

    async def list_accounts(self, skip: int = 0, take: int = 10) -> Dict[str, Any]:
        return await self._request("GET", "/accounts", params={"skip": skip, "take": take})

    async def get_account(self, account_id: int) -> Dict[str, Any]:
        return await self._request("GET", f"/accounts/{account_id}")

    async def create_account(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/accounts", json=data)

    async def update_account(self, account_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("PATCH", f"/accounts/{account_id}", json=data)

    async def list_payments(self, skip: int = 0, take: int = 10, account_id: Optional[int] = None) -> Dict[str, Any]:
        params = {"skip": skip, "take": take}
        if account_id is not None:
            params["accountId"] = account_id
        return await self._request("GET", "/payments", params=params)

    async def get_payment(self, payment_id: int) -> Dict[str, Any]:
        return await self._request("GET", f"/payments/{payment_id}")

    async def create_payment(self, account_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", f"/payments/{account_id}", json=data)

    async def update_payment(self, payment_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("PATCH", f"/payments/{payment_id}", json=data)

    async def set_payment_status(self, payment_id: int, status: str) -> Dict[str, Any]:
        return await self._request("PATCH", f"/payments/{payment_id}", json={"status": status})
