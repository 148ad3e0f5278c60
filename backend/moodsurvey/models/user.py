"""
Modèle SQLAlchemy pour la table users.
Un utilisateur est créé une fois par début de questionnaire, jamais modifié ensuite.
"""

from sqlalchemy import Column, DateTime, Integer, String, func

from moodsurvey.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)  # Attribué par le serveur
    name = Column(String(100), nullable=False)
    avatar = Column(String(500), nullable=True)   # Emoji ou référence d'image
    grade = Column(String(50), nullable=True)
    gender = Column(String(50), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
