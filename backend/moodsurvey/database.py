"""
Configuration de la connexion à la base de données.
Utilise SQLAlchemy avec un moteur synchrone (SQLite par défaut).
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker

from moodsurvey.config import settings

# SQLite : la session FastAPI peut changer de thread entre deux requêtes
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dépendance FastAPI — fournit une session BDD et la ferme après usage."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Crée les tables manquantes (aucun outil de migration)."""
    import moodsurvey.models  # noqa: F401 — enregistre les modèles dans Base.metadata

    Base.metadata.create_all(bind=engine)
