"""Command line interface for generating WiFi QR codes."""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from . import __version__
from .generate_qr import (
    BLACK,
    DEFAULT_BORDER,
    DEFAULT_BOX_SIZE,
    DEFAULT_ERROR_CORRECTION,
    DEFAULT_OUTPUT,
    WHITE,
    generate_wifi_qr,
    parse_color,
    parse_error_correction,
)
from .models import AUTH_TYPE_LABELS, AuthType, WifiQRError

log = logging.getLogger(__name__)

LOG_LEVEL_ENV = "WIFI_QR_LOG_LEVEL"
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def parse_auth_type(value: str) -> AuthType:
    try:
        return AuthType.parse(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wifi-qr",
        description="Generate a QR code for connecting to a WiFi network",
    )
    parser.add_argument("-s", "--ssid", required=True, help="WiFi network name")
    parser.add_argument(
        "-i",
        "--is-hidden",
        dest="is_hidden",
        action="store_true",
        help="Whether or not the network is hidden",
    )
    parser.add_argument(
        "-a",
        "--auth-type",
        dest="auth_type",
        type=parse_auth_type,
        default=AuthType.WPA,
        metavar="{" + ",".join(AUTH_TYPE_LABELS.values()) + "}",
        help="Authentication type (default: WPA)",
    )
    parser.add_argument(
        "-p",
        "--password",
        default=None,
        help="Password for the WiFi. Required for WPA and WEP, not allowed for NOPASS.",
    )
    parser.add_argument(
        "-o",
        "--output-image",
        dest="output_image",
        default=DEFAULT_OUTPUT,
        type=Path,
        help=f"Where to write the generated image (default: {DEFAULT_OUTPUT})",
    )
    parser.add_argument(
        "--no-escape",
        dest="escape",
        action="store_false",
        help="Embed the SSID and password verbatim instead of escaping ; , : \\ and \"",
    )
    parser.add_argument(
        "--box-size",
        dest="box_size",
        type=int,
        default=DEFAULT_BOX_SIZE,
        help="Size of one QR module in pixels",
    )
    parser.add_argument(
        "--border",
        type=int,
        default=DEFAULT_BORDER,
        help="Quiet-zone border around the code, in modules",
    )
    parser.add_argument(
        "--error-correction",
        dest="error_correction",
        type=parse_error_correction,
        default=DEFAULT_ERROR_CORRECTION,
        help="Error correction level: L, M, Q or H",
    )
    parser.add_argument(
        "--foreground",
        type=parse_color,
        default=BLACK,
        help="Module color in hexadecimal (#RRGGBB or #RRGGBBAA)",
    )
    parser.add_argument(
        "--background",
        type=parse_color,
        default=WHITE,
        help="Background color in hexadecimal (#RRGGBB or #RRGGBBAA)",
    )
    parser.add_argument(
        "--size",
        type=int,
        default=None,
        help="Final square image size in pixels",
    )
    parser.add_argument(
        "--modules",
        type=int,
        default=None,
        help="QR matrix size in modules (21, 25, 29, ...). Chosen automatically when omitted.",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=os.environ.get(LOG_LEVEL_ENV, "INFO"),
        help=f"Logging level (default: ${LOG_LEVEL_ENV} or INFO)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def main(args: list[str] | None = None) -> int:
    parser = build_argument_parser()
    parsed = parser.parse_args(args=args)
    try:
        configure_logging(parsed.log_level)
    except ValueError as exc:
        parser.error(str(exc))

    try:
        output_path = generate_wifi_qr(
            parsed.ssid,
            parsed.is_hidden,
            parsed.auth_type,
            parsed.password,
            parsed.output_image,
            escape=parsed.escape,
            box_size=parsed.box_size,
            border=parsed.border,
            foreground=parsed.foreground,
            background=parsed.background,
            error_correction=parsed.error_correction,
            matrix_modules=parsed.modules,
            output_size=parsed.size,
        )
    except WifiQRError as exc:
        log.debug("QR generation failed (%s)", exc.kind.value)
        print(f"error: {exc.message}", file=sys.stderr)
        return 1

    print(f"QR code saved to {output_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
