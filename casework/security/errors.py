"""
Access-control error hierarchy.

Each error carries a human-readable ``message``, a stable machine-readable
``code`` and the HTTP ``status_code`` it maps to. ``casework.main`` renders
them as ``{"error": message, "code": code}``; UI and mobile clients key off
the status and the ``error`` field, so neither may change casually.
"""

from __future__ import annotations


class AccessError(Exception):
    """Base class. Always terminal for the current request."""

    status_code: int = 403
    code: str = "access_error"
    default_message: str = "Access denied"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthenticationRequired(AccessError):
    status_code = 401
    code = "authentication_required"
    default_message = "Authentication required"


class IdentityNotFound(AccessError):
    status_code = 401
    code = "identity_not_found"
    default_message = "User not found"


class InvalidRole(AccessError):
    status_code = 403
    code = "invalid_role"
    default_message = "Invalid role"


class ClientRoleDenied(AccessError):
    status_code = 403
    code = "client_role_denied"
    default_message = "Access denied for client role"


class InsufficientRole(AccessError):
    status_code = 403
    code = "insufficient_role"
    default_message = "Access denied: insufficient permissions"


class OfficeNotAssigned(AccessError):
    status_code = 403
    code = "office_not_assigned"
    default_message = "Access denied: Staff member must be assigned to an office"


class AccessDenied(AccessError):
    status_code = 403
    code = "access_denied"


class ResourceNotFound(AccessError):
    status_code = 404
    code = "resource_not_found"
    default_message = "Resource not found"


class StoreUnavailable(AccessError):
    """The backing store could not be read. Never interpreted as allow or deny."""

    status_code = 503
    code = "store_unavailable"
    default_message = "Access data temporarily unavailable"


__all__ = [
    "AccessError",
    "AuthenticationRequired",
    "IdentityNotFound",
    "InvalidRole",
    "ClientRoleDenied",
    "InsufficientRole",
    "OfficeNotAssigned",
    "AccessDenied",
    "ResourceNotFound",
    "StoreUnavailable",
]
