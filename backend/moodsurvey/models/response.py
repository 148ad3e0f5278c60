"""
Modèle SQLAlchemy pour les réponses au questionnaire (échelle de Likert).

Architecture offline-first :
- plusieurs réponses pour le même couple (user, question) sont autorisées (reprise / correction)
- les doublons ne sont résolus qu'à l'agrégation (dernière réponse gagnante)
- timestamp : fourni par le client lors d'une synchronisation, sinon heure d'insertion
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer

from moodsurvey.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Response(Base):
    """Une réponse à une question — immuable une fois créée."""
    __tablename__ = "responses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # FK non vérifiée à l'écriture : la synchro peut renvoyer un id utilisateur non remappé
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    question_id = Column(Integer, nullable=False)
    score = Column(Integer, nullable=False)
    timestamp = Column(DateTime, nullable=False, default=_utcnow, index=True)
