"""
Router pour les utilisateurs.
POST /api/login                 : création au début du questionnaire
GET  /api/users                 : liste admin
GET  /api/users/{id}/responses  : réponses d'un utilisateur (question_id croissant)
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from moodsurvey.database import get_db
from moodsurvey.schemas.response import UserResponseRow
from moodsurvey.schemas.user import UserCreate, UserListItem, UserResponse
from moodsurvey.services import response_service, user_service

router = APIRouter(prefix="/api", tags=["Utilisateurs"])


@router.post("/login", response_model=UserResponse, summary="Créer un utilisateur")
def create_user(data: UserCreate, db: Session = Depends(get_db)):
    """Crée l'utilisateur et retourne l'id attribué par le serveur."""
    return user_service.create_user(db, data)


@router.get("/users", response_model=List[UserListItem], summary="Lister les utilisateurs")
def list_users(db: Session = Depends(get_db)):
    """Retourne tous les utilisateurs, du plus récent au plus ancien."""
    return user_service.list_users(db)


@router.get(
    "/users/{user_id}/responses",
    response_model=List[UserResponseRow],
    summary="Réponses d'un utilisateur",
)
def list_user_responses(user_id: int, db: Session = Depends(get_db)):
    """Réponses de l'utilisateur triées par question_id croissant (liste vide si inconnu)."""
    return response_service.list_user_responses(db, user_id)
