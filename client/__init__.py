# client/__init__.py

from .api import ApiClient, ApiClientError
from .session import ApiPermissionSource, ClientSession, SessionUser

__all__ = ["ApiClient", "ApiClientError", "ApiPermissionSource", "ClientSession", "SessionUser"]
