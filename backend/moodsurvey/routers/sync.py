"""
Router pour la synchronisation locale → serveur.
Reçoit en un seul appel les utilisateurs et réponses stockés hors-ligne par le client.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from moodsurvey.database import get_db
from moodsurvey.schemas.sync import SyncRequest, SyncResponse
from moodsurvey.services import sync_service

router = APIRouter(prefix="/api", tags=["Synchronisation offline"])


@router.post(
    "/sync",
    response_model=SyncResponse,
    summary="Synchroniser les données locales (offline → online)",
)
def sync_local_data(data: SyncRequest, db: Session = Depends(get_db)):
    """
    Insère les utilisateurs locaux, remappe les ids, puis insère les réponses.

    Comportement :
    - Chaque utilisateur local reçoit un nouvel id serveur
    - Les timestamps d'origine des réponses sont conservés
    - Transaction unique : en cas d'erreur rien n'est inséré (500)
    - Retourne 400 si ni users ni responses ne sont fournis
    """
    try:
        return sync_service.sync_local_data(db, data.users, data.responses)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
