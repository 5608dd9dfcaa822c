"""Convenience entry point for running the WiFi QR generator without CLI flags.

Update the configuration variables below to describe your network and where
the resulting image is written. When you run ``main.py`` (for example from
PyCharm) the script will use these values and immediately generate the QR
code image.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from wifi_qr.generate_qr import DEFAULT_OUTPUT, generate_wifi_qr, parse_color
from wifi_qr.models import WifiQRError

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------
# Name (SSID) of the WiFi network.
NETWORK_NAME = "my_wifi_network"

# Set to True when the network does not broadcast its name.
IS_HIDDEN = False

# One of "WPA", "WEP" or "NOPASS".
AUTH_TYPE = "WPA"

# Network password. Use None for NOPASS networks.
PASSWORD: str | None = "my_password"

# Where the generated QR code will be saved.
OUTPUT_PATH = DEFAULT_OUTPUT

# Background color for the QR code image. Accepts #RRGGBB or #RRGGBBAA.
BACKGROUND_COLOR = "#FFFFFFFF"


def main() -> int:
    """Generate a QR code using the configuration specified above."""

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        saved_path = generate_wifi_qr(
            NETWORK_NAME,
            IS_HIDDEN,
            AUTH_TYPE,
            PASSWORD,
            Path(OUTPUT_PATH),
            background=parse_color(BACKGROUND_COLOR),
        )
    except WifiQRError as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        return 1
    except ValueError as exc:
        # Unknown AUTH_TYPE label.
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(f"QR code saved to {saved_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
