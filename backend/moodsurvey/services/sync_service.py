"""
Service de synchronisation locale → serveur (variante batch).

Stratégie :
- Les utilisateurs créés hors-ligne reçoivent toujours un nouvel id serveur
  (aucune déduplication par contenu d'une synchro à l'autre)
- Les réponses sont réécrites avec l'id serveur de leur utilisateur ;
  un id local inconnu du batch est conservé tel quel
- Les timestamps d'origine sont conservés
- Toute la transaction est commitée en une seule fois ; une erreur annule tout
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from moodsurvey.models.response import Response
from moodsurvey.models.user import User
from moodsurvey.schemas.sync import SyncResponse, SyncResponseItem, SyncUserItem
from moodsurvey.services.response_service import to_utc

logger = logging.getLogger(__name__)


def sync_local_data(
    db: Session,
    users: Optional[List[SyncUserItem]],
    responses: Optional[List[SyncResponseItem]],
) -> SyncResponse:
    """
    Insère en batch les utilisateurs puis les réponses reçus d'un client.

    1. Insère chaque utilisateur et construit la table id local → id BDD (flush pour obtenir l'id)
    2. Insère chaque réponse avec l'id BDD de son utilisateur
    3. Commit unique ; rollback et propagation de l'erreur en cas d'échec

    Lève ValueError si aucune des deux listes n'est fournie.
    """
    if users is None and responses is None:
        raise ValueError("Aucune donnée à synchroniser.")

    user_id_map: Dict[int, int] = {}

    try:
        for item in users or []:
            user = User(
                name=item.name,
                avatar=item.avatar,
                grade=item.grade,
                gender=item.gender,
            )
            db.add(user)
            db.flush()
            user_id_map[item.id] = user.id

        for item in responses or []:
            db_user_id = user_id_map.get(item.user_id)
            if db_user_id is None:
                logger.warning(
                    "Utilisateur local %s absent du batch, id conservé tel quel", item.user_id
                )
                db_user_id = item.user_id
            db.add(
                Response(
                    user_id=db_user_id,
                    question_id=item.question_id,
                    score=item.score,
                    timestamp=to_utc(item.timestamp),
                )
            )

        db.commit()
    except Exception:
        db.rollback()
        raise

    synced_users = len(users or [])
    synced_responses = len(responses or [])
    logger.info(
        "Synchro batch : %d utilisateurs, %d réponses insérés", synced_users, synced_responses
    )

    return SyncResponse(synced_users=synced_users, synced_responses=synced_responses)
