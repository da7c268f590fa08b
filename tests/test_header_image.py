import base64

import pytest
import requests

from facturier.models.errors import ImageLoadError
from facturier.pdf import header_image
from facturier.pdf.header_image import resolve_header_image


def test_local_png_is_reencoded(png_file):
    image = resolve_header_image(str(png_file))
    assert image.png_bytes.startswith(b"\x89PNG")
    assert (image.width_px, image.height_px) == (200, 50)


def test_file_url_and_data_url(png_file):
    assert resolve_header_image(png_file.as_uri()).width_px == 200

    data_url = "data:image/png;base64," + base64.b64encode(png_file.read_bytes()).decode("ascii")
    assert resolve_header_image(data_url).height_px == 50


def test_missing_file_raises(tmp_path):
    with pytest.raises(ImageLoadError, match="Failed to load image"):
        resolve_header_image(str(tmp_path / "absent.png"))


def test_undecodable_bytes_raise(tmp_path):
    bad = tmp_path / "bad.png"
    bad.write_bytes(b"pas une image")
    with pytest.raises(ImageLoadError):
        resolve_header_image(str(bad))


def test_oversized_image_raises_image_load_error(png_file, monkeypatch):
    monkeypatch.setattr(header_image.Image, "MAX_IMAGE_PIXELS", 1000)
    with pytest.raises(ImageLoadError, match="Failed to load image"):
        resolve_header_image(str(png_file))


def test_empty_url_raises():
    with pytest.raises(ImageLoadError):
        resolve_header_image("")


def test_remote_fetch_error_is_wrapped(monkeypatch):
    def boom(url, timeout):
        raise requests.exceptions.ConnectionError("réseau coupé")

    monkeypatch.setattr(header_image.requests, "get", boom)
    with pytest.raises(ImageLoadError, match="Failed to load image"):
        resolve_header_image("https://cdn.test/entete.png")


def test_remote_fetch_ok(monkeypatch, png_file):
    class Resp:
        content = png_file.read_bytes()

        def raise_for_status(self):
            return None

    monkeypatch.setattr(header_image.requests, "get", lambda url, timeout: Resp())
    assert resolve_header_image("https://cdn.test/entete.png").width_px == 200
