"""Credential types and error kinds shared by the encoder and renderer."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class AuthType(Enum):
    """Authentication schemes understood by the ``WIFI:`` payload."""

    WPA = "wpa"
    WEP = "wep"
    NOPASS = "nopass"

    @property
    def label(self) -> str:
        return AUTH_TYPE_LABELS[self]

    @property
    def requires_password(self) -> bool:
        return self is not AuthType.NOPASS

    @classmethod
    def parse(cls, value: str | AuthType) -> AuthType:
        """Return the member whose label matches *value*, ignoring case."""

        if isinstance(value, cls):
            return value
        key = str(value).strip().upper()
        for member, label in AUTH_TYPE_LABELS.items():
            if label == key:
                return member
        choices = ", ".join(AUTH_TYPE_LABELS.values())
        raise ValueError(f"Unsupported authentication type '{value}'. Choose one of: {choices}")

    def __str__(self) -> str:
        return self.label


AUTH_TYPE_LABELS: Dict[AuthType, str] = {
    AuthType.WPA: "WPA",
    AuthType.WEP: "WEP",
    AuthType.NOPASS: "NOPASS",
}


class ErrorKind(Enum):
    VALIDATION = "validation"
    ENCODING = "encoding"
    IO = "io"


class WifiQRError(Exception):
    """Base class for every failure reported to the user."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(WifiQRError):
    """Password presence does not match the authentication type."""

    kind = ErrorKind.VALIDATION


class EncodingError(WifiQRError):
    """The QR backend rejected the text or the render options."""

    kind = ErrorKind.ENCODING


class ImageWriteError(WifiQRError):
    """The rendered image could not be written to its destination."""

    kind = ErrorKind.IO


@dataclass(frozen=True)
class WifiCredential:
    ssid: str
    is_hidden: bool = False
    auth_type: AuthType = AuthType.WPA
    password: Optional[str] = None
