"""
Schémas Pydantic pour les réponses au questionnaire.
Échelle de Likert fixe : 1 à 5.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

MIN_SCORE = 1
MAX_SCORE = 5


class ResponseCreate(BaseModel):
    """Corps de POST /api/response."""

    user_id: int
    question_id: int = Field(gt=0)
    score: int = Field(ge=MIN_SCORE, le=MAX_SCORE)
    # Fourni uniquement lors d'une synchro pour conserver l'ordre historique
    timestamp: Optional[datetime] = None


class ResponseAck(BaseModel):
    """Accusé de réception d'une réponse enregistrée."""
    id: int
    status: str = "saved"


class UserResponseRow(BaseModel):
    """Ligne de GET /api/users/{id}/responses."""
    id: int
    user_id: int
    question_id: int
    score: int
    timestamp: datetime

    model_config = {"from_attributes": True}


class AdminResponseRow(BaseModel):
    """Ligne jointe utilisateur × réponse de GET /api/admin/responses."""
    user_id: int
    user_name: str
    user_avatar: Optional[str] = None
    user_grade: Optional[str] = None
    user_gender: Optional[str] = None
    question_id: int
    score: int
    timestamp: datetime
