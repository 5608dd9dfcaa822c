"""Build the ``WIFI:`` text payload that phones recognise when scanning a QR code.

Format reference:
https://pocketables.com/2022/01/how-to-format-that-wifi-qr-code-in-plain-text.html
"""
from __future__ import annotations

from typing import Optional

from .models import AuthType, ValidationError, WifiCredential

NOPASS_PASSWORD = "nopass"

# Backslash must come first so the escapes added for the others survive.
RESERVED_CHARACTERS = ("\\", ";", ",", ":", '"')


def escape_field(value: str) -> str:
    """Backslash-escape the characters that delimit fields in the payload."""

    for char in RESERVED_CHARACTERS:
        value = value.replace(char, "\\" + char)
    return value


def wifi_code(
    ssid: str,
    is_hidden: bool,
    auth_type: AuthType | str,
    password: Optional[str] = None,
    *,
    escape: bool = True,
) -> str:
    """Return the WiFi payload for the given network parameters.

    ``password`` must be given for WPA and WEP networks and must be ``None``
    for open (NOPASS) networks, where the literal ``nopass`` takes its place.
    An empty string counts as a given password.

    With ``escape`` disabled the SSID and password are embedded verbatim, so
    values containing ``;``, ``,``, ``:``, ``\\`` or ``"`` produce a payload
    that scanners may split in the wrong place.
    """

    auth = AuthType.parse(auth_type)

    if auth.requires_password:
        if password is None:
            raise ValidationError("password required for WPA/WEP")
        password_field = escape_field(password) if escape else password
    else:
        if password is not None:
            raise ValidationError("password must not be provided for NOPASS")
        password_field = NOPASS_PASSWORD

    ssid_field = escape_field(ssid) if escape else ssid
    hidden_field = "true" if is_hidden else "false"
    return f"WIFI:S:{ssid_field};T:{auth.label};P:{password_field};H:{hidden_field};;"


def credential_code(credential: WifiCredential, *, escape: bool = True) -> str:
    """Shortcut for :func:`wifi_code` taking a :class:`WifiCredential`."""

    return wifi_code(
        credential.ssid,
        credential.is_hidden,
        credential.auth_type,
        credential.password,
        escape=escape,
    )
