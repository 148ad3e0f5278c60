"""
Questionnaire : liste fixe et ordonnée fournie de l'extérieur (fichier JSON).
Seul le nombre de questions sert au calcul de progression.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, TypeAdapter, field_validator

from moodsurvey.config import settings

logger = logging.getLogger(__name__)


class Question(BaseModel):
    id: int
    text: str
    image_filename: Optional[str] = None
    ruby_text: Optional[str] = None

    @field_validator("id")
    @classmethod
    def positive_id(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("L'id de question doit être un entier positif.")
        return v


_questions = TypeAdapter(List[Question])


def load_questions(path: Optional[str] = None) -> List[Question]:
    """
    Charge la liste depuis QUESTIONS_FILE (ou path).
    Lève ValueError si le fichier est absent, invalide, ou contient des ids en double.
    """
    file_path = Path(path or settings.QUESTIONS_FILE)
    try:
        raw = json.loads(file_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ValueError(f"Questionnaire illisible : {file_path} ({exc})") from exc

    questions = _questions.validate_python(raw)
    ids = [q.id for q in questions]
    if len(ids) != len(set(ids)):
        raise ValueError(f"Ids de question en double dans {file_path}.")

    logger.info("Questionnaire chargé : %d questions", len(questions))
    return questions
