"""
Exceptions du client offline-first.

Une seule erreur pour le serveur distant, quelle qu'en soit la cause
(réseau, délai dépassé, statut HTTP d'erreur, corps illisible).
"""

from typing import Any, Dict, Optional


class MoodSurveyClientError(Exception):
    """Erreur de base du client."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | {self.details}"
        return self.message


class RemoteUnavailableError(MoodSurveyClientError):
    """Serveur injoignable, trop lent, ou réponse non 2xx."""


class SyncFailedError(MoodSurveyClientError):
    """
    Échec d'une synchronisation. Les données locales sont conservées intactes ;
    le serveur peut avoir reçu une partie des créations (pas de transaction).
    """


class DashboardLoadError(MoodSurveyClientError):
    """Impossible de charger les données du tableau de bord admin."""
