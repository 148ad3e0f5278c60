"""
Schémas Pydantic pour la synchronisation locale → serveur.
Endpoint : POST /api/sync
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from moodsurvey.schemas.response import MAX_SCORE, MIN_SCORE

MAX_BATCH_SIZE = 5000


class SyncUserItem(BaseModel):
    """Utilisateur créé hors-ligne ; id = identifiant local (horodatage client)."""

    id: int
    name: str
    avatar: Optional[str] = None
    grade: Optional[str] = None
    gender: Optional[str] = None


class SyncResponseItem(BaseModel):
    """Réponse créée hors-ligne ; user_id est dans l'espace d'ids local."""

    id: Optional[int] = None
    user_id: int
    question_id: int = Field(gt=0)
    score: int = Field(ge=MIN_SCORE, le=MAX_SCORE)
    timestamp: datetime           # Conservé tel quel (ordre historique)


class SyncRequest(BaseModel):
    """Corps de la requête batch de synchronisation."""

    users: Optional[List[SyncUserItem]] = None
    responses: Optional[List[SyncResponseItem]] = None

    @field_validator("users", "responses")
    @classmethod
    def batch_not_too_large(cls, v):
        if v is not None and len(v) > MAX_BATCH_SIZE:
            raise ValueError(f"Batch trop grand : maximum {MAX_BATCH_SIZE} éléments par requête.")
        return v


class SyncResponse(BaseModel):
    """Rapport de synchronisation retourné par le serveur."""

    status: str = "synced"
    synced_users: int
    synced_responses: int
