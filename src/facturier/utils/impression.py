# utils/impression.py
"""
Ouverture et impression de fichiers avec les outils du système.
- Windows : os.startfile(path) / os.startfile(path, "print")
- macOS   : open / lp
- Linux   : xdg-open ou gio open / lpr ou lp
"""

import os
import sys
import logging
import subprocess

logger = logging.getLogger(__name__)


def open_file_with_default_app(path: str) -> None:
    """
    Ouvre le fichier avec l'application par défaut selon la plateforme.
    Lève une exception si l'ouverture échoue.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(path)

    if sys.platform.startswith("win"):
        os.startfile(path)
        return

    if sys.platform == "darwin":
        subprocess.Popen(["open", path])
        return

    for cmd in (["xdg-open", path], ["gio", "open", path]):
        try:
            subprocess.Popen(cmd)
            return
        except FileNotFoundError:
            continue
    raise RuntimeError("Aucune application d'ouverture trouvée (xdg-open/gio absent)")


def print_file_direct(path: str) -> bool:
    """
    Tente d'envoyer directement le PDF à l'imprimante par défaut.
    Retourne True si une commande a été lancée sans erreur immédiate.
    """
    if not os.path.exists(path):
        return False

    if sys.platform.startswith("win"):
        try:
            os.startfile(path, "print")
            return True
        except OSError:
            logger.warning("Impression directe impossible pour %s", path)
            return False

    commands = [["lp", path]] if sys.platform == "darwin" else [["lpr", path], ["lp", path]]
    for cmd in commands:
        try:
            subprocess.check_call(cmd)
            return True
        except (FileNotFoundError, subprocess.CalledProcessError):
            continue
    return False


def print_or_open(path: str) -> str:
    """
    Impression directe si possible, sinon ouverture dans la visionneuse
    pour impression manuelle.
    Retourne "printed" ou "opened".
    """
    if print_file_direct(path):
        logger.info("PDF envoyé à l'imprimante : %s", path)
        return "printed"
    open_file_with_default_app(path)
    logger.info("PDF ouvert pour impression : %s", path)
    return "opened"
