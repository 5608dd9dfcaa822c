"""Render text as a QR code image and write it to disk."""
from __future__ import annotations

import argparse
import logging
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import Dict, Optional, Tuple

from PIL import Image
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q
from qrcode.exceptions import DataOverflowError
from qrcode.main import QRCode

from .models import AuthType, EncodingError, ImageWriteError
from .wifi_code import wifi_code

log = logging.getLogger(__name__)

Color = Tuple[int, int, int, int]

DEFAULT_OUTPUT = Path("wifi_qr.png")
DEFAULT_BOX_SIZE = 10
DEFAULT_BORDER = 4
DEFAULT_ERROR_CORRECTION = "M"
BLACK: Color = (0, 0, 0, 255)
WHITE: Color = (255, 255, 255, 255)

ERROR_CORRECTION_LEVELS: Dict[str, int] = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}

# Formats that cannot store an alpha channel.
OPAQUE_FORMATS = {"JPEG", "BMP"}


def parse_error_correction(value: str) -> int:
    try:
        return ERROR_CORRECTION_LEVELS[value.strip().upper()]
    except KeyError:
        raise argparse.ArgumentTypeError("Error correction must be one of L, M, Q, H") from None


def modules_to_version(modules: int) -> int:
    """Convert a requested module count to the corresponding QR version.

    Standard QR codes are square with sizes: 21×21 for version 1 and
    increasing by 4 modules per side for each subsequent version, up to
    177×177 for version 40.
    """

    if modules < 21:
        raise ValueError("The smallest standard QR code is 21×21 modules (version 1)")
    if (modules - 21) % 4 != 0:
        raise ValueError("QR code size must be one of 21, 25, 29, … (21 + 4*n modules)")

    version = (modules - 21) // 4 + 1
    if version > 40:
        raise ValueError("The largest standard QR code is 177×177 modules (version 40)")
    return version


def version_to_modules(version: int) -> int:
    """Return the module count for a QR version."""

    if version < 1:
        raise ValueError("QR version must be 1 or greater")
    return 21 + 4 * (version - 1)


def create_qr_matrix(
    data: str,
    *,
    version: int | None = None,
    error_correction: int = ERROR_CORRECT_M,
    border: int = DEFAULT_BORDER,
) -> Tuple[list[list[bool]], int]:
    """Return the module matrix for *data*, quiet zone included, and its border width."""

    try:
        qr = QRCode(error_correction=error_correction, box_size=1, border=border, version=version)
        qr.add_data(data)
        try:
            qr.make(fit=version is None)
        except DataOverflowError:
            if version is None:
                raise
            log.warning(
                "Data does not fit a %dx%d matrix, choosing the size automatically",
                version_to_modules(version),
                version_to_modules(version),
            )
            qr = QRCode(error_correction=error_correction, box_size=1, border=border)
            qr.add_data(data)
            qr.make(fit=True)
    except (DataOverflowError, ValueError) as exc:
        reason = str(exc) or "data too long for a QR code"
        raise EncodingError(f"cannot encode text: {reason}") from exc

    return qr.get_matrix(), int(qr.border)


def build_canvas(matrix_size: int, box_size: int, background: Color) -> Image.Image:
    canvas_size = matrix_size * box_size
    return Image.new("RGBA", (canvas_size, canvas_size), background)


def paste_modules(
    canvas: Image.Image,
    matrix: Sequence[Sequence[bool]],
    box_size: int,
    foreground: Color,
) -> None:
    for row_index, row in enumerate(matrix):
        for col_index, cell in enumerate(row):
            if not cell:
                continue
            left = col_index * box_size
            top = row_index * box_size
            canvas.paste(foreground, (left, top, left + box_size, top + box_size))


def render_qr(
    data: str,
    *,
    box_size: int = DEFAULT_BOX_SIZE,
    border: int = DEFAULT_BORDER,
    foreground: Color = BLACK,
    background: Color = WHITE,
    error_correction: int = ERROR_CORRECT_M,
    matrix_modules: int | None = None,
    output_size: int | None = None,
) -> Image.Image:
    """Rasterise *data* as a QR code.

    Each dark module becomes a ``box_size`` square of ``foreground`` on a
    ``background`` canvas surrounded by a ``border`` modules wide quiet zone.
    ``matrix_modules`` pins the matrix size (21, 25, 29, ...) and
    ``output_size`` scales the finished image to a fixed number of pixels.
    """

    if box_size <= 0:
        raise EncodingError("Box size must be a positive integer")
    if border < 0:
        raise EncodingError("Border must be non-negative")
    if output_size is not None and output_size <= 0:
        raise EncodingError("Output size must be a positive integer")

    matrix_version = None
    if matrix_modules is not None:
        try:
            matrix_version = modules_to_version(matrix_modules)
        except ValueError as exc:
            raise EncodingError(str(exc)) from exc

    matrix, _ = create_qr_matrix(
        data,
        version=matrix_version,
        error_correction=error_correction,
        border=border,
    )

    canvas = build_canvas(len(matrix), box_size, background)
    paste_modules(canvas, matrix, box_size, foreground)

    if output_size is not None:
        canvas = canvas.resize((output_size, output_size), Image.Resampling.NEAREST)
    return canvas


def image_format_for(path: Path) -> str:
    extension = path.suffix.lower()
    image_format = Image.registered_extensions().get(extension)
    if image_format is None:
        raise ImageWriteError(f"cannot write file '{path}': unknown image extension '{extension}'")
    # Some registered formats can only be read.
    Image.init()
    if image_format not in Image.SAVE:
        raise ImageWriteError(f"cannot write file '{path}': {image_format} images cannot be written")
    return image_format


def default_file_mode() -> int:
    """Return the mode a freshly created file gets under the current umask."""

    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def save_image(image: Image.Image, output: Path) -> Path:
    """Write *image* to *output* without ever leaving a partial file behind.

    The image is written to a temporary file next to the destination and
    renamed over it once complete. The finished file gets the usual
    umask-derived permissions rather than the temporary file's private ones.
    """

    output = Path(output)
    image_format = image_format_for(output)
    if image_format in OPAQUE_FORMATS:
        image = image.convert("RGB")

    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{output.name}.", suffix=".tmp", dir=output.parent)
    except OSError as exc:
        raise ImageWriteError(f"cannot write file '{output}': {exc}") from exc

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as handle:
            image.save(handle, format=image_format)
        os.chmod(tmp_path, default_file_mode())
        os.replace(tmp_path, output)
    except (OSError, ValueError, KeyError) as exc:
        tmp_path.unlink(missing_ok=True)
        raise ImageWriteError(f"cannot write file '{output}': {exc}") from exc
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    return output


def generate_qr(data: str, output: Path, **render_options) -> Path:
    image = render_qr(data, **render_options)
    saved = save_image(image, output)
    log.info("Writing QR code image to: %s", saved)
    return saved


def generate_wifi_qr(
    ssid: str,
    is_hidden: bool,
    auth_type: AuthType | str,
    password: Optional[str],
    output: Path = DEFAULT_OUTPUT,
    *,
    escape: bool = True,
    **render_options,
) -> Path:
    """Encode the network parameters and write them as a scannable QR image.

    Validation, encoding and write failures propagate as
    :class:`~wifi_qr.models.WifiQRError` subclasses; nothing is written
    unless every step succeeds.
    """

    auth = AuthType.parse(auth_type)
    log.info('Creating QR code for SSID: "%s" with authentication: [%s]', ssid, auth.label)
    payload = wifi_code(ssid, is_hidden, auth, password, escape=escape)
    return generate_qr(payload, output, **render_options)


def parse_color(value: str) -> Color:
    if value.startswith("#"):
        value = value[1:]
    if len(value) not in {6, 8}:
        raise argparse.ArgumentTypeError("Color must be in #RRGGBB or #RRGGBBAA format")
    try:
        r = int(value[0:2], 16)
        g = int(value[2:4], 16)
        b = int(value[4:6], 16)
        a = 255
        if len(value) == 8:
            a = int(value[6:8], 16)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid hexadecimal color '#{value}'") from None
    return r, g, b, a
