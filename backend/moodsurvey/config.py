"""
Configuration centrale de l'application via variables d'environnement.
Charger depuis un fichier .env en développement.

Les mêmes réglages servent au backend (DATABASE_URL) et au client
offline-first (API_URL, délais, stockage local).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Base de données (SQLite par défaut, toute URL SQLAlchemy acceptée)
    DATABASE_URL: str = "sqlite:///./sel_database.sqlite"

    # Client — API distante
    API_URL: str = "http://localhost:8000/api"

    # Délais en secondes : écritures courtes, lectures admin plus longues
    WRITE_TIMEOUT_USER: float = 3.0
    WRITE_TIMEOUT_RESPONSE: float = 2.0
    READ_TIMEOUT: float = 5.0
    HEALTH_TIMEOUT: float = 2.0
    SYNC_TIMEOUT: float = 10.0

    # Client — stockage local de secours
    LOCAL_STORE_DIR: str = ".sel_local"

    # Synchronisation
    SYNC_MAX_WORKERS: int = 8
    AUTO_SYNC_INTERVAL_MINUTES: int = 0  # 0 = désactivé

    # Questionnaire (liste fixe fournie de l'extérieur)
    QUESTIONS_FILE: str = "questions.json"

    # Environnement
    ENV: str = "development"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = Settings()
