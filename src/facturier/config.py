# config.py
"""
Configuration centrale.
- get_user_data_dir() : dossier utilisateur (writable) selon la plateforme
- load_user_env() : copie .env.example -> <user_dir>/.env au premier lancement puis charge .env utilisateur
- load_settings() : instantané figé des variables FACTURIER_* (résolu une seule fois au démarrage)
"""

import os
import sys
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

APP_NAME = "facturier"
_PROJECT_ROOT = Path(__file__).resolve().parents[2]
_PROJECT_ENV = _PROJECT_ROOT / ".env"
_PROJECT_ENV_EXAMPLE = _PROJECT_ROOT / ".env.example"

DEFAULT_API_URL = "http://localhost:3001"
DEFAULT_REQUEST_TIMEOUT = 30  # secondes
DEFAULT_LOG_FILE = "facturier.log"
STORAGE_BUCKET = "organization-assets"
HEADER_UPLOAD_DIR = "invoice-headers"
MAX_HEADER_IMAGE_BYTES = 5 * 1024 * 1024


def get_user_data_dir(app_name: str = APP_NAME) -> Path:
    if sys.platform.startswith("win"):
        base = Path(os.getenv("APPDATA") or Path.home())
        return (base / app_name).expanduser().resolve()
    if sys.platform == "darwin":
        return (Path.home() / "Library" / "Application Support" / app_name).resolve()
    return (Path.home() / ".local" / "share" / app_name).resolve()


def load_user_env(env_name: str = ".env", env_example_name: str = ".env.example", override: bool = True) -> Path:
    """
    Charge le .env utilisateur. Au premier lancement, le .env.example du projet
    est copié dans le dossier utilisateur.
    """
    user_dir = get_user_data_dir()
    user_dir.mkdir(parents=True, exist_ok=True)
    env_path = user_dir / env_name

    if not env_path.exists():
        candidate = _PROJECT_ROOT / env_example_name
        if candidate.exists():
            shutil.copy2(str(candidate), str(env_path))

    if env_path.exists():
        load_dotenv(dotenv_path=str(env_path), override=override)
    return env_path


def _get_env(name: str) -> Optional[str]:
    v = os.getenv(name)
    if v is None:
        return None
    v = v.strip()
    return v if v else None


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name)
    if raw is None:
        return default
    try:
        return max(1, int(raw))
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    api_url: str
    auth_url: Optional[str]
    auth_key: Optional[str]
    storage_url: Optional[str]
    request_timeout: int
    log_file: str
    output_dir: Path
    preferences_path: Path
    session_path: Path


def load_settings(load_env_files: bool = True) -> Settings:
    """
    Résout la configuration une seule fois.
    Ordre : .env du projet (sans écraser l'environnement), puis .env utilisateur.
    """
    if load_env_files:
        if _PROJECT_ENV.exists():
            load_dotenv(dotenv_path=str(_PROJECT_ENV), override=False)
        load_user_env(override=False)

    user_dir = get_user_data_dir()
    api_url = (_get_env("FACTURIER_API_URL") or DEFAULT_API_URL).rstrip("/")
    auth_url = _get_env("FACTURIER_AUTH_URL")
    storage_url = _get_env("FACTURIER_STORAGE_URL")
    output_dir = Path(_get_env("FACTURIER_OUTPUT_DIR") or Path.cwd()).expanduser()

    return Settings(
        api_url=api_url,
        auth_url=auth_url.rstrip("/") if auth_url else None,
        auth_key=_get_env("FACTURIER_AUTH_KEY"),
        storage_url=storage_url.rstrip("/") if storage_url else None,
        request_timeout=_get_env_int("FACTURIER_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
        log_file=_get_env("FACTURIER_LOG_FILE") or DEFAULT_LOG_FILE,
        output_dir=output_dir,
        preferences_path=user_dir / "preferences.json",
        session_path=user_dir / "session_data.json",
    )
