"""
Service métier pour les utilisateurs (création au début du questionnaire, listage admin).
"""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from moodsurvey.models.user import User
from moodsurvey.schemas.user import UserCreate, UserListItem, UserResponse

logger = logging.getLogger(__name__)


def create_user(db: Session, data: UserCreate) -> UserResponse:
    """Insère un utilisateur et retourne l'id attribué par la base."""
    user = User(
        name=data.name,
        avatar=data.avatar,
        grade=data.grade,
        gender=data.gender,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("Utilisateur créé : id=%s", user.id)
    return UserResponse.model_validate(user)


def list_users(db: Session) -> List[UserListItem]:
    """Tous les utilisateurs, du plus récent au plus ancien."""
    users = db.execute(
        select(User).order_by(User.created_at.desc(), User.id.desc())
    ).scalars().all()
    return [UserListItem.model_validate(u) for u in users]
