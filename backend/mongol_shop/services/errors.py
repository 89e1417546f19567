"""Business-rule failures raised by the account and catalog services.

Each error carries the HTTP status the API layer answers with, so routers
never translate them one by one; `mongol_shop.main` installs a single
handler for `ShopError`.
"""
from typing import Optional

from fastapi import status


class ShopError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"detail": self.message, "error": type(self).__name__}


class ValidationError(ShopError):
    status_code = 422


class ConflictError(ShopError):
    """A unique value (username, email, provider identity) is already taken."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(message or f"{field.capitalize()} already exists")
        self.field = field

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["field"] = self.field
        return data


class NotFoundError(ShopError):
    status_code = status.HTTP_404_NOT_FOUND


class RoleError(ShopError):
    status_code = status.HTTP_403_FORBIDDEN


class OwnershipError(ShopError):
    status_code = status.HTTP_403_FORBIDDEN


class InactiveAccountError(ShopError):
    status_code = status.HTTP_403_FORBIDDEN


class AuthError(ShopError):
    status_code = status.HTTP_401_UNAUTHORIZED


class SuspendedError(ShopError):
    status_code = status.HTTP_403_FORBIDDEN
