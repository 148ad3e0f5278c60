"""
Point d'entrée principal de l'API du questionnaire d'humeur.
Démarrage : uvicorn moodsurvey.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from moodsurvey.database import init_db
from moodsurvey.routers import responses, sync, users

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Cycle de vie de l'application : crée les tables manquantes au démarrage."""
    init_db()
    yield


app = FastAPI(
    title="Mood Survey API",
    description="API du questionnaire d'humeur pour enfants (offline-first)",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# CORS — autorise tous les ports localhost en développement (à restreindre en production).
app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Accept"],
)


app.include_router(users.router)
app.include_router(responses.router)
app.include_router(sync.router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Intercepte toutes les exceptions non gérées pour garantir que la réponse 500
    passe bien par CORSMiddleware. Le client traite tout 500 comme « serveur indisponible ».
    """
    logger.error("Exception non gérée : %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Une erreur interne est survenue."},
    )


@app.get("/api/health", tags=["Santé"])
def health_check():
    """Vérifie que l'API est opérationnelle (sonde utilisée par le client)."""
    return {
        "status": "ok",
        "service": "Mood Survey API",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
