# pdf/header_image.py
"""
Chargement de l'image d'en-tête de facture.
- URL distante (http/https) via requests, fichier local (chemin ou file://) ou data: URL
- décodage Pillow, recopie sur une surface RGBA hors écran à la taille naturelle
- ré-encodage PNG pour intégration dans le PDF
Toute erreur est levée en ImageLoadError ; le rendu remplace alors l'image par le titre texte.
"""

from __future__ import annotations

import base64
import io
import logging
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote, urlparse

import requests
from PIL import Image, UnidentifiedImageError

from facturier.models.errors import ImageLoadError

logger = logging.getLogger(__name__)

_REQUEST_TIMEOUT = 30  # secondes


@dataclass(frozen=True)
class HeaderImage:
    png_bytes: bytes
    width_px: int
    height_px: int


def _fetch_bytes(url: str, timeout: float) -> bytes:
    parsed = urlparse(url)
    scheme = (parsed.scheme or "").lower()

    if scheme in ("http", "https"):
        try:
            response = requests.get(url, timeout=timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise ImageLoadError(f"Failed to load image: {e}") from e
        return response.content

    if scheme == "data":
        try:
            _, encoded = url.split(",", 1)
            return base64.b64decode(encoded)
        except ValueError as e:
            raise ImageLoadError(f"Failed to load image: data URL invalide ({e})") from e

    # aperçu local : file:// ou chemin direct
    path = Path(unquote(parsed.path)) if scheme == "file" else Path(url)
    try:
        return path.read_bytes()
    except OSError as e:
        raise ImageLoadError(f"Failed to load image: {e}") from e


def resolve_header_image(url: str, timeout: float = _REQUEST_TIMEOUT) -> HeaderImage:
    if not url:
        raise ImageLoadError("Failed to load image: URL vide")

    raw = _fetch_bytes(url, timeout)

    try:
        with Image.open(io.BytesIO(raw)) as src:
            src.load()
            rgba = src.convert("RGBA")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError, MemoryError) as e:
        raise ImageLoadError(f"Failed to load image: {e}") from e

    try:
        surface = Image.new("RGBA", rgba.size, (0, 0, 0, 0))
        surface.paste(rgba, (0, 0), mask=rgba)
        buf = io.BytesIO()
        surface.save(buf, format="PNG")
    except (OSError, ValueError, MemoryError) as e:
        raise ImageLoadError(f"Canvas context not available: {e}") from e

    logger.debug("Image d'en-tête chargée (%dx%d) depuis %s", surface.width, surface.height, url)
    return HeaderImage(png_bytes=buf.getvalue(), width_px=surface.width, height_px=surface.height)
