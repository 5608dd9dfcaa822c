import argparse
import logging
import os
import stat
from pathlib import Path

import pytest
from PIL import Image

from wifi_qr import generate_qr
from wifi_qr.generate_qr import (
    BLACK,
    WHITE,
    generate_wifi_qr,
    modules_to_version,
    parse_color,
    parse_error_correction,
    render_qr,
    save_image,
    version_to_modules,
)
from wifi_qr.models import EncodingError, ErrorKind, ImageWriteError, ValidationError


def test_modules_to_version_follows_standard_progression() -> None:
    assert modules_to_version(21) == 1
    assert modules_to_version(25) == 2
    assert modules_to_version(177) == 40
    assert version_to_modules(4) == 33


@pytest.mark.parametrize("modules", [17, 22, 181])
def test_modules_to_version_rejects_non_standard_sizes(modules: int) -> None:
    with pytest.raises(ValueError):
        modules_to_version(modules)


def test_parse_color() -> None:
    assert parse_color("#102030") == (16, 32, 48, 255)
    assert parse_color("10203080") == (16, 32, 48, 128)
    with pytest.raises(argparse.ArgumentTypeError):
        parse_color("#12345")
    with pytest.raises(argparse.ArgumentTypeError):
        parse_color("#zzzzzz")


def test_parse_error_correction() -> None:
    assert parse_error_correction("h") == generate_qr.ERROR_CORRECT_H
    with pytest.raises(argparse.ArgumentTypeError):
        parse_error_correction("X")


def test_render_qr_layout() -> None:
    image = render_qr("hello", box_size=10, border=4, matrix_modules=33)

    assert image.mode == "RGBA"
    assert image.size == ((33 + 8) * 10, (33 + 8) * 10)
    # Quiet zone is background, the top-left finder pattern starts right after it.
    assert image.getpixel((0, 0)) == WHITE
    assert image.getpixel((40, 40)) == BLACK


def test_render_qr_auto_size_is_a_standard_matrix() -> None:
    image = render_qr("WIFI:S:my_wifi_network;T:WPA;P:my_password;H:false;;", box_size=3, border=2)

    width, height = image.size
    assert width == height
    assert width % 3 == 0
    modules = width // 3 - 4
    modules_to_version(modules)


def test_render_qr_custom_colors_and_output_size() -> None:
    red = (255, 0, 0, 255)
    image = render_qr("hello", foreground=red, background=(0, 0, 0, 0), output_size=64)

    assert image.size == (64, 64)
    assert image.getpixel((0, 0)) == (0, 0, 0, 0)
    assert red in {color for _, color in image.getcolors()}


def test_render_qr_rejects_data_that_does_not_fit() -> None:
    with pytest.raises(EncodingError, match="cannot encode text") as excinfo:
        render_qr("x" * 5000)

    assert excinfo.value.kind is ErrorKind.ENCODING


def test_render_qr_falls_back_to_automatic_size(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="wifi_qr.generate_qr"):
        image = render_qr("x" * 100, box_size=1, border=0, matrix_modules=21)

    assert image.size[0] > 21
    assert "choosing the size automatically" in caplog.text


@pytest.mark.parametrize(
    "options",
    [
        {"box_size": 0},
        {"border": -1},
        {"output_size": 0},
        {"matrix_modules": 23},
    ],
)
def test_render_qr_rejects_invalid_options(options: dict) -> None:
    with pytest.raises(EncodingError):
        render_qr("hello", **options)


def test_save_image_creates_parent_directories(tmp_path: Path) -> None:
    output = tmp_path / "nested" / "dir" / "code.png"

    saved = save_image(render_qr("hello"), output)

    assert saved == output
    with Image.open(output) as written:
        assert written.format == "PNG"
    assert sorted(p.name for p in output.parent.iterdir()) == ["code.png"]


def test_save_image_converts_for_formats_without_alpha(tmp_path: Path) -> None:
    output = tmp_path / "code.jpg"

    save_image(render_qr("hello"), output)

    with Image.open(output) as written:
        assert written.format == "JPEG"


def test_save_image_rejects_unknown_extension(tmp_path: Path) -> None:
    with pytest.raises(ImageWriteError, match="unknown image extension") as excinfo:
        save_image(render_qr("hello"), tmp_path / "code.xyz")

    assert excinfo.value.kind is ErrorKind.IO
    assert list(tmp_path.iterdir()) == []


def test_save_image_leaves_nothing_behind_on_failure(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def fail_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(generate_qr.os, "replace", fail_replace)

    with pytest.raises(ImageWriteError, match="disk full"):
        save_image(render_qr("hello"), tmp_path / "code.png")

    assert list(tmp_path.iterdir()) == []


def test_save_image_keeps_existing_file_on_failure(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    output = tmp_path / "code.png"
    output.write_bytes(b"previous")

    def fail_replace(src, dst):
        raise OSError("read-only file system")

    monkeypatch.setattr(generate_qr.os, "replace", fail_replace)

    with pytest.raises(ImageWriteError):
        save_image(render_qr("hello"), output)

    assert output.read_bytes() == b"previous"
    assert list(tmp_path.iterdir()) == [output]


def test_generate_wifi_qr_writes_image(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    output = tmp_path / "wifi.png"

    with caplog.at_level(logging.INFO, logger="wifi_qr"):
        saved = generate_wifi_qr("my_wifi_network", False, "WPA", "my_password", output)

    assert saved == output
    assert output.exists()
    assert 'SSID: "my_wifi_network" with authentication: [WPA]' in caplog.text
    assert "my_password" not in caplog.text


def test_generate_wifi_qr_validation_error_writes_nothing(tmp_path: Path) -> None:
    with pytest.raises(ValidationError):
        generate_wifi_qr("my_wifi_network", False, "NOPASS", "my_password", tmp_path / "wifi.png")

    assert list(tmp_path.iterdir()) == []


def test_save_image_rejects_read_only_formats(tmp_path: Path) -> None:
    with pytest.raises(ImageWriteError, match="cannot be written") as excinfo:
        save_image(render_qr("hello"), tmp_path / "code.psd")

    assert excinfo.value.kind is ErrorKind.IO
    assert list(tmp_path.iterdir()) == []


def test_save_image_cleans_up_after_unexpected_errors(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def interrupted(src, dst):
        raise KeyboardInterrupt

    monkeypatch.setattr(generate_qr.os, "replace", interrupted)

    with pytest.raises(KeyboardInterrupt):
        save_image(render_qr("hello"), tmp_path / "code.png")

    assert list(tmp_path.iterdir()) == []


def test_save_image_uses_umask_permissions(tmp_path: Path) -> None:
    output = tmp_path / "code.png"
    previous = os.umask(0o022)
    try:
        save_image(render_qr("hello"), output)
    finally:
        os.umask(previous)

    assert stat.S_IMODE(output.stat().st_mode) == 0o644
