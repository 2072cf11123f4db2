from collections import OrderedDict
from typing import Optional
import logging
import uuid
from fastapi import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

CLIENT_COOKIE = "backoffice_admin"
MAX_TRACKED_CLIENTS = 1000

class Notifier:
    """
    Single-slot notification channel for the admin UI.

    notify() is fire-and-forget; a newer message replaces any message that
    has not been shown yet. consume() hands the message to the next rendered
    page and clears it, so each message is shown once.
    """

    def __init__(self):
        self._message: Optional[str] = None

    def notify(self, message: str) -> None:
        logger.info(f"Admin notification: {message}")
        self._message = message

    def peek(self) -> Optional[str]:
        return self._message

    def consume(self) -> Optional[str]:
        message, self._message = self._message, None
        return message

class NotifierRegistry:
    """One Notifier per admin client; the least recently seen clients are dropped first"""

    def __init__(self, max_clients: int = MAX_TRACKED_CLIENTS):
        self.max_clients = max_clients
        self._notifiers: "OrderedDict[str, Notifier]" = OrderedDict()

    def for_client(self, client_id: str) -> Notifier:
        notifier = self._notifiers.pop(client_id, None) or Notifier()
        self._notifiers[client_id] = notifier
        while len(self._notifiers) > self.max_clients:
            self._notifiers.popitem(last=False)
        return notifier

    def __contains__(self, client_id: str) -> bool:
        return client_id in self._notifiers

    def clear(self) -> None:
        self._notifiers.clear()

registry = NotifierRegistry()

class AdminSession:
    """The requesting admin client and its notification channel"""

    def __init__(self, client_id: str, notifier: Notifier, is_new: bool = False):
        self.client_id = client_id
        self.notifier = notifier
        self.is_new = is_new

    def attach(self, response: Response) -> Response:
        """Hand a first-time client its id so later requests reach the same channel"""
        if self.is_new:
            response.set_cookie(CLIENT_COOKIE, self.client_id, httponly=True, samesite="lax")
        return response

def get_admin_session(request: Request) -> AdminSession:
    client_id = request.cookies.get(CLIENT_COOKIE)
    is_new = not client_id
    if is_new:
        client_id = uuid.uuid4().hex
    return AdminSession(client_id, registry.for_client(client_id), is_new=is_new)
