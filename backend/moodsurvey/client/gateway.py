"""
Passerelle double mode : serveur d'abord, stockage local en repli.

Pour chaque opération :
1. Appel distant sous un délai court (écritures 2–3 s, lectures 5 s)
2. Succès → résultat étiqueté Provenance.REMOTE
3. Échec quelconque → opération équivalente sur le stockage local,
   résultat étiqueté Provenance.LOCAL

Le repli n'est pas une nouvelle tentative : il remplace l'appel distant pour
cet appel uniquement, sans que l'appelant ne voie l'erreur distante.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import List, Optional

from moodsurvey.client.exceptions import RemoteUnavailableError
from moodsurvey.client.identifiers import UNKNOWN_LOCAL_USER, RecordId
from moodsurvey.client.local_store import LocalFallbackStore
from moodsurvey.client.records import (
    AdminResponseRow,
    Provenance,
    ResponseRecord,
    Sourced,
    SubmitAck,
    User,
)
from moodsurvey.client.remote_client import RemoteStoreClient
from moodsurvey.config import settings

logger = logging.getLogger(__name__)

# Valeurs affichées pour une réponse locale dont l'utilisateur est introuvable
UNKNOWN_USER_NAME = "Unknown (Local)"
UNKNOWN_USER_AVATAR = "🙂"


class DataGateway:
    """Point d'accès unique aux données pour l'interface (questionnaire et admin)."""

    def __init__(self, remote: RemoteStoreClient, local: LocalFallbackStore):
        self.remote = remote
        self.local = local
        self._background = ThreadPoolExecutor(max_workers=1, thread_name_prefix="submit")

    def close(self) -> None:
        """Attend la fin des écritures en arrière-plan."""
        self._background.shutdown(wait=True)

    # ============================================================
    # Santé
    # ============================================================

    def check_health(self) -> bool:
        """Sonde du serveur ; ne lève jamais d'exception."""
        try:
            return self.remote.health(timeout=settings.HEALTH_TIMEOUT)
        except RemoteUnavailableError:
            return False

    # ============================================================
    # Écritures
    # ============================================================

    def create_user(
        self, name: str, avatar: Optional[str] = None, grade: Optional[str] = None,
        gender: Optional[str] = None,
    ) -> User:
        try:
            return self.remote.create_user(
                name, avatar, grade, gender, timeout=settings.WRITE_TIMEOUT_USER,
            )
        except RemoteUnavailableError as exc:
            logger.warning("Serveur injoignable, utilisateur créé localement : %s", exc)

        local_user = self.local.add_user(name, avatar, grade, gender)
        return User(
            id=RecordId.local(local_user.id),
            name=local_user.name,
            avatar=local_user.avatar,
            grade=local_user.grade,
            gender=local_user.gender,
        )

    def submit_response(self, user_id: RecordId, question_id: int, score: int) -> SubmitAck:
        """
        Un utilisateur local n'existe pas côté serveur : sa réponse part
        directement dans le stockage local, où la synchro la remappera.
        """
        if not user_id.is_local:
            try:
                return self.remote.submit_response(
                    user_id, question_id, score, timeout=settings.WRITE_TIMEOUT_RESPONSE,
                )
            except RemoteUnavailableError as exc:
                logger.warning("Serveur injoignable, réponse enregistrée localement : %s", exc)

        local_response = self.local.add_response(user_id, question_id, score)
        return SubmitAck(id=RecordId.local(local_response.id), status="saved_local")

    def submit_response_background(self, user_id: RecordId, question_id: int, score: int) -> Future:
        """
        Écriture « fire and forget » : l'interface passe à la question suivante sans
        attendre. Un échec (distant ET local) est journalisé, jamais relancé ni remonté.
        """
        future = self._background.submit(self.submit_response, user_id, question_id, score)
        future.add_done_callback(_log_background_failure)
        return future

    def clear_local_data(self) -> None:
        self.local.clear()

    # ============================================================
    # Lectures
    # ============================================================

    def fetch_all_responses(self) -> Sourced:
        """Toutes les réponses jointes aux utilisateurs, timestamp décroissant."""
        try:
            rows = self.remote.fetch_all_responses(timeout=settings.READ_TIMEOUT)
            return Sourced(source=Provenance.REMOTE, data=rows)
        except RemoteUnavailableError as exc:
            logger.warning("Serveur injoignable, lecture des données locales : %s", exc)

        users, responses = self.local.snapshot()
        users_by_id = {RecordId.local(u.id): u for u in users}

        rows: List[AdminResponseRow] = []
        for response in responses:
            user = users_by_id.get(response.owner)
            if user is not None:
                rows.append(AdminResponseRow(
                    user_id=RecordId.local(user.id),
                    user_name=user.name,
                    user_avatar=user.avatar,
                    user_grade=user.grade,
                    user_gender=user.gender,
                    question_id=response.question_id,
                    score=response.score,
                    timestamp=response.timestamp,
                ))
            else:
                rows.append(AdminResponseRow(
                    user_id=UNKNOWN_LOCAL_USER,
                    user_name=UNKNOWN_USER_NAME,
                    user_avatar=UNKNOWN_USER_AVATAR,
                    user_grade="",
                    user_gender="",
                    question_id=response.question_id,
                    score=response.score,
                    timestamp=response.timestamp,
                ))

        rows.sort(key=lambda r: r.timestamp, reverse=True)
        return Sourced(source=Provenance.LOCAL, data=rows)

    def fetch_user_responses(self, user_id: RecordId) -> Sourced:
        """
        Réponses d'un utilisateur. Ordres différents selon la provenance :
        serveur → question_id croissant ; local → timestamp décroissant.
        """
        if not user_id.is_local:
            try:
                rows = self.remote.fetch_user_responses(user_id, timeout=settings.READ_TIMEOUT)
                return Sourced(source=Provenance.REMOTE, data=rows)
            except RemoteUnavailableError as exc:
                logger.warning("Serveur injoignable, lecture locale pour %s : %s", user_id, exc)

        records = [
            ResponseRecord(
                id=RecordId.local(r.id),
                user_id=r.owner,
                question_id=r.question_id,
                score=r.score,
                timestamp=r.timestamp,
            )
            for r in self.local.responses()
            if r.owner == user_id
        ]
        records.sort(key=lambda r: r.timestamp, reverse=True)
        return Sourced(source=Provenance.LOCAL, data=records)


def _log_background_failure(future: Future) -> None:
    exc = future.exception()
    if exc is not None:
        logger.error("Échec de l'écriture en arrière-plan (réponse perdue) : %s", exc, exc_info=exc)
