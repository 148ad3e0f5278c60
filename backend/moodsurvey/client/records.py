"""
Enregistrements manipulés côté client.

Les ids sont étiquetés (RecordId) ; le stockage local, lui, conserve des entiers
bruts comme le fait le serveur : tout ce qui est lu depuis le stockage local est
d'origine locale par construction.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, field_validator

from moodsurvey.client.identifiers import RecordId

T = TypeVar("T")


def as_utc(value: datetime) -> datetime:
    """SQLite renvoie des datetimes naïfs : on les considère en UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Provenance(str, Enum):
    """Origine d'un résultat de lecture."""
    REMOTE = "remote"
    LOCAL = "local"


class Sourced(BaseModel, Generic[T]):
    """Résultat de lecture accompagné de sa provenance."""
    source: Provenance
    data: T


class User(BaseModel):
    id: RecordId
    name: str
    avatar: Optional[str] = None
    grade: Optional[str] = None
    gender: Optional[str] = None


class SubmitAck(BaseModel):
    """Accusé d'enregistrement : 'saved' (serveur) ou 'saved_local' (repli)."""
    id: RecordId
    status: str

    @property
    def saved_locally(self) -> bool:
        return self.status == "saved_local"


class ResponseRecord(BaseModel):
    """Une réponse telle que lue pour un utilisateur."""
    id: RecordId
    user_id: RecordId
    question_id: int
    score: int
    timestamp: datetime

    @field_validator("timestamp")
    @classmethod
    def timestamp_utc(cls, v: datetime) -> datetime:
        return as_utc(v)


class AdminResponseRow(BaseModel):
    """Ligne jointe utilisateur × réponse, champs d'affichage dupliqués sur chaque ligne."""
    user_id: RecordId
    user_name: str
    user_avatar: Optional[str] = None
    user_grade: Optional[str] = None
    user_gender: Optional[str] = None
    question_id: int
    score: int
    timestamp: datetime

    @field_validator("timestamp")
    @classmethod
    def timestamp_utc(cls, v: datetime) -> datetime:
        return as_utc(v)


class SyncResult(BaseModel):
    synced_users: int = 0
    synced_responses: int = 0
