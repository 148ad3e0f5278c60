"""
Service métier pour les réponses au questionnaire.

Deux lectures aux ordres volontairement différents :
- vue admin (toutes les réponses) : timestamp décroissant, requis par l'agrégation
- réponses d'un utilisateur : question_id croissant
"""

import logging
from datetime import datetime, timezone
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from moodsurvey.models.response import Response
from moodsurvey.models.user import User
from moodsurvey.schemas.response import (
    AdminResponseRow,
    ResponseAck,
    ResponseCreate,
    UserResponseRow,
)

logger = logging.getLogger(__name__)


def to_utc(value: datetime) -> datetime:
    """Stockage en UTC : SQLite ne conserve pas le fuseau."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc)


def create_response(db: Session, data: ResponseCreate) -> ResponseAck:
    """
    Enregistre une réponse. Aucune contrainte d'unicité sur (user_id, question_id) :
    les doublons sont résolus à l'agrégation.
    """
    response = Response(
        user_id=data.user_id,
        question_id=data.question_id,
        score=data.score,
    )
    if data.timestamp is not None:
        response.timestamp = to_utc(data.timestamp)
    db.add(response)
    db.commit()
    db.refresh(response)

    logger.debug(
        "Réponse enregistrée : id=%s user=%s question=%s",
        response.id, data.user_id, data.question_id,
    )
    return ResponseAck(id=response.id, status="saved")


def list_all_responses(db: Session) -> List[AdminResponseRow]:
    """
    Jointure utilisateurs × réponses pour le tableau de bord admin.
    Les réponses sans utilisateur connu sont exclues (INNER JOIN).
    """
    rows = db.execute(
        select(User, Response)
        .join(User, Response.user_id == User.id)
        .order_by(Response.timestamp.desc(), Response.id.desc())
    ).all()

    return [
        AdminResponseRow(
            user_id=user.id,
            user_name=user.name,
            user_avatar=user.avatar,
            user_grade=user.grade,
            user_gender=user.gender,
            question_id=response.question_id,
            score=response.score,
            timestamp=response.timestamp,
        )
        for user, response in rows
    ]


def list_user_responses(db: Session, user_id: int) -> List[UserResponseRow]:
    """Réponses d'un utilisateur, triées par question_id croissant."""
    responses = db.execute(
        select(Response)
        .where(Response.user_id == user_id)
        .order_by(Response.question_id.asc(), Response.id.asc())
    ).scalars().all()
    return [UserResponseRow.model_validate(r) for r in responses]
