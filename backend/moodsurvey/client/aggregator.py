"""
Agrégation des réponses brutes en une synthèse par élève.

Contrat d'entrée : lignes triées par timestamp décroissant (lecture admin).
La première ligne rencontrée pour un couple (utilisateur, question) est donc
la plus récente : c'est elle qui est retenue. Si le contrat n'est pas respecté,
le résultat est faux sans erreur.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from moodsurvey.client.identifiers import RecordId
from moodsurvey.client.records import AdminResponseRow

DEFAULT_AVATAR = "🧑‍🎓"


class StudentSummary(BaseModel):
    """Synthèse dérivée (jamais stockée) : dernier score par question."""

    user_id: RecordId
    name: str
    avatar: str
    grade: Optional[str] = None
    gender: Optional[str] = None
    answers: Dict[int, int] = Field(default_factory=dict)   # question_id → score
    last_timestamp: datetime

    @property
    def total_score(self) -> int:
        return sum(self.answers.values())

    @property
    def answered_count(self) -> int:
        return len(self.answers)

    def progress(self, total_questions: int) -> str:
        return f"{self.answered_count}/{total_questions}"


def aggregate_responses(rows: Iterable[AdminResponseRow]) -> List[StudentSummary]:
    """
    Une synthèse par utilisateur, dans l'ordre de première apparition.
    Le timestamp le plus récent est suivi à part, indépendamment de l'ordre.
    """
    summaries: Dict[RecordId, StudentSummary] = {}

    for row in rows:
        summary = summaries.get(row.user_id)
        if summary is None:
            summary = StudentSummary(
                user_id=row.user_id,
                name=row.user_name,
                avatar=row.user_avatar or DEFAULT_AVATAR,
                grade=row.user_grade,
                gender=row.user_gender,
                last_timestamp=row.timestamp,
            )
            summaries[row.user_id] = summary

        # Ligne plus ancienne pour une question déjà vue → ignorée
        if row.question_id not in summary.answers:
            summary.answers[row.question_id] = row.score

        if row.timestamp > summary.last_timestamp:
            summary.last_timestamp = row.timestamp

    return list(summaries.values())
