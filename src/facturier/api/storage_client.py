# api/storage_client.py
"""
Stockage objet des images d'en-tête (API REST de type Supabase Storage).
- upload : POST {storage_url}/object/{bucket}/{chemin} (x-upsert), images <= 5 Mo uniquement
- URL publique : {storage_url}/object/public/{bucket}/{chemin}
Chemin : invoice-headers/{org_id}-header-{epoch_ms}.{ext}
"""

import logging
import mimetypes
import time
from pathlib import Path
from typing import Callable, Optional

import requests

from facturier.config import DEFAULT_REQUEST_TIMEOUT, HEADER_UPLOAD_DIR, MAX_HEADER_IMAGE_BYTES, STORAGE_BUCKET
from facturier.models.errors import AuthError, NetworkError, ValidationError

logger = logging.getLogger(__name__)


def header_object_path(org_id: str, filename: str, now_ms: Optional[int] = None) -> str:
    ext = filename.rsplit(".", 1)[-1] if "." in filename else "png"
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{HEADER_UPLOAD_DIR}/{org_id}-header-{stamp}.{ext}"


def validate_header_file(path: Path) -> str:
    """Vérifie type et taille ; retourne le type MIME."""
    mime, _ = mimetypes.guess_type(path.name)
    if not mime or not mime.startswith("image/"):
        raise ValidationError("Veuillez sélectionner une image")
    try:
        size = path.stat().st_size
    except OSError as e:
        raise ValidationError(f"Fichier introuvable : {path}") from e
    if size > MAX_HEADER_IMAGE_BYTES:
        raise ValidationError("L'image ne doit pas dépasser 5MB")
    return mime


class StorageClient:
    def __init__(self, storage_url: str, api_key: Optional[str] = None,
                 token_provider: Optional[Callable[[], Optional[str]]] = None,
                 bucket: str = STORAGE_BUCKET, timeout: float = DEFAULT_REQUEST_TIMEOUT, http=None):
        self.storage_url = storage_url.rstrip("/")
        self.api_key = api_key
        self.token_provider = token_provider
        self.bucket = bucket
        self.timeout = timeout
        self.http = http or requests.Session()

    def public_url(self, object_path: str) -> str:
        return f"{self.storage_url}/object/public/{self.bucket}/{object_path}"

    def upload_header_image(self, org_id: str, file_path, now_ms: Optional[int] = None) -> str:
        """Envoie l'image (upsert) et retourne son URL publique."""
        path = Path(file_path)
        mime = validate_header_file(path)
        object_path = header_object_path(org_id, path.name, now_ms)

        headers = {"Content-Type": mime, "cache-control": "3600", "x-upsert": "true"}
        if self.api_key:
            headers["apikey"] = self.api_key
        token = self.token_provider() if self.token_provider else None
        if token or self.api_key:
            headers["Authorization"] = f"Bearer {token or self.api_key}"

        url = f"{self.storage_url}/object/{self.bucket}/{object_path}"
        logger.info("Upload de l'image d'en-tête vers %s", object_path)
        try:
            response = self.http.post(url, data=path.read_bytes(), headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error("Erreur lors de l'upload : %s", e)
            raise NetworkError("Erreur lors de l'upload") from e

        logger.debug("Code HTTP: %s", response.status_code)
        if response.status_code in (401, 403):
            raise AuthError("Upload refusé : session expirée ou droits insuffisants")
        if not 200 <= response.status_code < 300:
            logger.debug("Réponse brute: %s", response.text)
            raise NetworkError("Erreur lors de l'upload", status_code=response.status_code)

        return self.public_url(object_path)
