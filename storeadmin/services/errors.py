from __future__ import annotations

import enum

from fastapi import status


class AdminErrorKind(str, enum.Enum):
    MISSING_CREDENTIAL = "MISSING_CREDENTIAL"
    INVALID_CREDENTIAL = "INVALID_CREDENTIAL"
    EXPIRED_CREDENTIAL = "EXPIRED_CREDENTIAL"
    INVALID_LOGIN = "INVALID_LOGIN"
    ACCOUNT_NOT_ACTIVE = "ACCOUNT_NOT_ACTIVE"
    INSUFFICIENT_PRIVILEGE = "INSUFFICIENT_PRIVILEGE"
    SELF_DEACTIVATION_FORBIDDEN = "SELF_DEACTIVATION_FORBIDDEN"
    SUBJECT_NOT_FOUND = "SUBJECT_NOT_FOUND"
    TARGET_NOT_FOUND = "TARGET_NOT_FOUND"
    INVALID_NAME = "INVALID_NAME"
    INVALID_EMAIL = "INVALID_EMAIL"
    INVALID_LEVEL = "INVALID_LEVEL"
    INVALID_STATUS = "INVALID_STATUS"
    WEAK_PASSWORD = "WEAK_PASSWORD"
    INVALID_TOKEN = "INVALID_TOKEN"
    EXPIRED_TOKEN = "EXPIRED_TOKEN"
    EMAIL_TAKEN = "EMAIL_TAKEN"
    ALREADY_ACTIVATED = "ALREADY_ACTIVATED"
    EMAIL_DELIVERY_FAILED = "EMAIL_DELIVERY_FAILED"


HTTP_STATUS_BY_KIND = {
    AdminErrorKind.MISSING_CREDENTIAL: status.HTTP_401_UNAUTHORIZED,
    AdminErrorKind.INVALID_CREDENTIAL: status.HTTP_401_UNAUTHORIZED,
    AdminErrorKind.EXPIRED_CREDENTIAL: status.HTTP_401_UNAUTHORIZED,
    AdminErrorKind.INVALID_LOGIN: status.HTTP_401_UNAUTHORIZED,
    AdminErrorKind.ACCOUNT_NOT_ACTIVE: status.HTTP_403_FORBIDDEN,
    AdminErrorKind.INSUFFICIENT_PRIVILEGE: status.HTTP_403_FORBIDDEN,
    AdminErrorKind.SELF_DEACTIVATION_FORBIDDEN: status.HTTP_403_FORBIDDEN,
    AdminErrorKind.SUBJECT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    AdminErrorKind.TARGET_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    AdminErrorKind.INVALID_NAME: status.HTTP_400_BAD_REQUEST,
    AdminErrorKind.INVALID_EMAIL: status.HTTP_400_BAD_REQUEST,
    AdminErrorKind.INVALID_LEVEL: status.HTTP_400_BAD_REQUEST,
    AdminErrorKind.INVALID_STATUS: status.HTTP_400_BAD_REQUEST,
    AdminErrorKind.WEAK_PASSWORD: status.HTTP_400_BAD_REQUEST,
    AdminErrorKind.INVALID_TOKEN: status.HTTP_400_BAD_REQUEST,
    AdminErrorKind.EXPIRED_TOKEN: status.HTTP_400_BAD_REQUEST,
    AdminErrorKind.EMAIL_TAKEN: status.HTTP_409_CONFLICT,
    AdminErrorKind.ALREADY_ACTIVATED: status.HTTP_409_CONFLICT,
    AdminErrorKind.EMAIL_DELIVERY_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class AdminError(Exception):
    """A guard or validation failure with a human-readable message."""

    def __init__(self, kind: AdminErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def http_status(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]

    def __repr__(self) -> str:
        return f"AdminError({self.kind.value}, {self.message!r})"
