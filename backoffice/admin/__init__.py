"""Server-rendered admin UI that drives the REST API over HTTP."""

from .routes import router, get_api_client
from .notifications import AdminSession, Notifier, get_admin_session, registry

__all__ = ["router", "get_api_client", "AdminSession", "Notifier", "get_admin_session", "registry"]
