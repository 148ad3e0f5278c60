"""
Router pour les réponses au questionnaire.
POST /api/response         : enregistrement d'une réponse
GET  /api/admin/responses  : toutes les réponses jointes aux utilisateurs (plus récentes d'abord)
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from moodsurvey.database import get_db
from moodsurvey.schemas.response import AdminResponseRow, ResponseAck, ResponseCreate
from moodsurvey.services import response_service

router = APIRouter(prefix="/api", tags=["Réponses"])


@router.post("/response", response_model=ResponseAck, summary="Enregistrer une réponse")
def create_response(data: ResponseCreate, db: Session = Depends(get_db)):
    """
    Enregistre un score (échelle 1–5) pour une question.
    Plusieurs réponses à la même question sont acceptées (reprise / correction).
    """
    return response_service.create_response(db, data)


@router.get(
    "/admin/responses",
    response_model=List[AdminResponseRow],
    summary="Toutes les réponses (admin)",
)
def list_all_responses(db: Session = Depends(get_db)):
    """Jointure utilisateurs × réponses, triée par timestamp décroissant."""
    return response_service.list_all_responses(db)
