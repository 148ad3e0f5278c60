"""
Synchronisation du stockage local vers le serveur.

Protocole (run) :
1. Crée chaque utilisateur local sur le serveur, en parallèle ; construit la table
   id local → id serveur
2. Barrière : toutes les créations d'utilisateurs sont terminées
3. Crée chaque réponse locale, en parallèle, avec l'id serveur de son utilisateur
   et son timestamp d'origine
4. Succès complet uniquement → les enregistrements envoyés quittent le stockage local

Pas de transaction côté serveur : un échec au milieu laisse un envoi partiel
sur le serveur, mais le stockage local reste intact pour une nouvelle tentative.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Tuple

from moodsurvey.client.exceptions import RemoteUnavailableError, SyncFailedError
from moodsurvey.client.identifiers import IdMap, RecordId
from moodsurvey.client.local_store import LocalFallbackStore, LocalResponse, LocalUser
from moodsurvey.client.records import SyncResult
from moodsurvey.client.remote_client import RemoteStoreClient
from moodsurvey.config import settings

logger = logging.getLogger(__name__)


class SyncReconciler:

    def __init__(
        self,
        remote: RemoteStoreClient,
        local: LocalFallbackStore,
        max_workers: Optional[int] = None,
    ):
        self.remote = remote
        self.local = local
        self.max_workers = max_workers or settings.SYNC_MAX_WORKERS

    def run(self) -> SyncResult:
        """
        Envoie utilisateurs puis réponses locaux, une création par enregistrement.
        Lève SyncFailedError au premier échec ; le stockage local n'est pas modifié.
        """
        users, responses = self.local.snapshot()
        if not users and not responses:
            logger.info("Synchro : rien à envoyer")
            return SyncResult(synced_users=0, synced_responses=0)

        id_map = IdMap()
        workers = max(1, min(self.max_workers, max(len(users), len(responses))))

        try:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sync") as pool:
                # Phase 1 — list() attend toutes les créations (barrière)
                created = list(pool.map(self._create_user, users))
                for user, remote_id in zip(users, created):
                    id_map.record(RecordId.local(user.id), remote_id)

                # Phase 2
                list(pool.map(lambda r: self._create_response(r, id_map), responses))
        except RemoteUnavailableError as exc:
            logger.error(
                "Synchro échouée, données locales conservées (%d utilisateurs, %d réponses) : %s",
                len(users), len(responses), exc,
            )
            raise SyncFailedError(
                "La synchronisation a échoué.",
                details={"users": len(users), "responses": len(responses)},
            ) from exc

        self.local.discard([u.id for u in users], [r.id for r in responses])
        logger.info("Synchro : %d utilisateurs, %d réponses envoyés", len(users), len(responses))
        return SyncResult(synced_users=len(users), synced_responses=len(responses))

    def run_batch(self) -> SyncResult:
        """
        Variante en un seul appel POST /sync : le serveur remappe les ids dans
        une transaction unique. Même contrat sur le stockage local.
        """
        users, responses = self.local.snapshot()
        if not users and not responses:
            logger.info("Synchro batch : rien à envoyer")
            return SyncResult(synced_users=0, synced_responses=0)

        try:
            result = self.remote.sync_batch(
                [u.model_dump(mode="json") for u in users],
                [r.model_dump(mode="json") for r in responses],
                timeout=settings.SYNC_TIMEOUT,
            )
        except RemoteUnavailableError as exc:
            logger.error("Synchro batch échouée, données locales conservées : %s", exc)
            raise SyncFailedError(
                "La synchronisation a échoué.",
                details={"users": len(users), "responses": len(responses)},
            ) from exc

        self.local.discard([u.id for u in users], [r.id for r in responses])
        logger.info(
            "Synchro batch : %d utilisateurs, %d réponses envoyés",
            result.synced_users, result.synced_responses,
        )
        return result

    # --- Créations unitaires ---

    def _create_user(self, user: LocalUser) -> RecordId:
        created = self.remote.create_user(
            user.name, user.avatar, user.grade, user.gender,
            timeout=settings.WRITE_TIMEOUT_USER,
        )
        logger.debug("Utilisateur local %s → serveur %s", user.id, created.id.value)
        return created.id

    def _create_response(self, response: LocalResponse, id_map: IdMap) -> None:
        user_id = id_map.resolve(response.owner)
        self.remote.submit_response(
            user_id,
            response.question_id,
            response.score,
            timeout=settings.WRITE_TIMEOUT_RESPONSE,
            timestamp=response.timestamp,
        )


def pending_counts(local: LocalFallbackStore) -> Tuple[int, int]:
    """(utilisateurs, réponses) en attente de synchro."""
    users, responses = local.snapshot()
    return len(users), len(responses)
