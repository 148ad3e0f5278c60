"""
Schémas Pydantic pour les utilisateurs (enfants répondant au questionnaire).
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class UserCreate(BaseModel):
    """Schéma de création d'un utilisateur (POST /api/login)."""
    name: str
    avatar: Optional[str] = None
    grade: Optional[str] = None
    gender: Optional[str] = None

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le nom est obligatoire.")
        return v.strip()


class UserResponse(BaseModel):
    """Utilisateur tel que retourné par le serveur (id attribué par la BDD)."""
    id: int
    name: str
    avatar: Optional[str] = None
    grade: Optional[str] = None
    gender: Optional[str] = None

    model_config = {"from_attributes": True}


class UserListItem(UserResponse):
    """Ligne de GET /api/users."""
    created_at: Optional[datetime] = None
