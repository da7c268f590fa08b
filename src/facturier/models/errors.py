# models/errors.py
"""
Taxonomie des erreurs du client de facturation.
Les contrôleurs (niveau page) attrapent FacturierError et affichent le message
dans un bandeau ; ImageLoadError est toujours récupérée localement par le rendu.
"""

from typing import Optional


class FacturierError(Exception):
    """Erreur de base : le message est destiné à l'utilisateur."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


class AuthError(FacturierError):
    """Session absente, invalide ou expirée ; accès admin refusé."""


class ValidationError(FacturierError):
    """Sélection ou champ requis manquant (ex. aucun établissement choisi)."""


class NetworkError(FacturierError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ImageLoadError(FacturierError):
    """L'image d'en-tête n'a pas pu être chargée, décodée ou ré-encodée."""


class RenderError(FacturierError):
    """Échec fatal du rendu PDF (hors image d'en-tête)."""
