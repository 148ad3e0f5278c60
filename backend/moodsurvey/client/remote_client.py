"""
Client HTTP de l'API distante.

Chaque appel prend un délai (secondes) qui borne l'appel entier, corps compris
(le timeout httpx ne borne que chaque étape). Toute erreur (réseau, délai dépassé,
statut non 2xx, corps illisible) est remontée sous une seule forme :
RemoteUnavailableError. Le choix du repli appartient à l'appelant.
"""

import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from moodsurvey.client.exceptions import RemoteUnavailableError
from moodsurvey.client.identifiers import RecordId
from moodsurvey.client.records import AdminResponseRow, ResponseRecord, SubmitAck, SyncResult, User
from moodsurvey.config import settings
from moodsurvey.schemas.response import AdminResponseRow as RemoteAdminRow
from moodsurvey.schemas.response import ResponseAck, UserResponseRow
from moodsurvey.schemas.sync import SyncResponse
from moodsurvey.schemas.user import UserResponse

logger = logging.getLogger(__name__)

_admin_rows = TypeAdapter(List[RemoteAdminRow])
_user_rows = TypeAdapter(List[UserResponseRow])


class RemoteStoreClient:
    """
    Enveloppe httpx.Client. Un client HTTP peut être injecté (tests :
    httpx.MockTransport ou fastapi.testclient.TestClient).
    """

    def __init__(self, base_url: Optional[str] = None, http_client: Optional[httpx.Client] = None):
        self.base_url = base_url or settings.API_URL
        self._http = http_client or httpx.Client(base_url=self.base_url)
        # Synchro parallèle + sonde + écriture en arrière-plan
        self._pool = ThreadPoolExecutor(
            max_workers=settings.SYNC_MAX_WORKERS + 4, thread_name_prefix="remote",
        )

    def close(self) -> None:
        self._pool.shutdown(wait=False)
        self._http.close()

    # --- Bas niveau ---

    def _request(
        self, method: str, path: str, timeout: float, body: Any = None, decode: bool = True,
    ) -> Any:
        """
        Exécute l'appel sur le pool et n'attend pas plus que timeout. Un appel
        abandonné s'arrête de lui-même au bloc suivant (échéance dépassée).
        """
        deadline = time.monotonic() + timeout
        future = self._pool.submit(self._fetch, method, path, timeout, deadline, body, decode)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError as exc:
            future.cancel()
            raise RemoteUnavailableError(
                f"Délai dépassé ({timeout}s) : {method} {path}",
                details={"cause": "DeadlineExceeded", "timeout": timeout},
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            # ValueError couvre un corps JSON invalide
            raise RemoteUnavailableError(
                f"Serveur indisponible : {method} {path}",
                details={"cause": type(exc).__name__, "error": str(exc)},
            ) from exc

    def _fetch(
        self, method: str, path: str, timeout: float, deadline: float, body: Any, decode: bool,
    ) -> Any:
        with self._http.stream(method, path, json=body, timeout=timeout) as response:
            response.raise_for_status()
            if not decode:
                return None
            chunks = []
            for chunk in response.iter_bytes():
                if time.monotonic() > deadline:
                    raise httpx.ReadTimeout(
                        f"Délai total de {timeout}s dépassé", request=response.request,
                    )
                chunks.append(chunk)
        return json.loads(b"".join(chunks))

    # --- Opérations ---

    def health(self, timeout: float) -> bool:
        """Seul le statut compte. Lève RemoteUnavailableError si la sonde échoue."""
        self._request("GET", "/health", timeout, decode=False)
        return True

    def create_user(
        self, name: str, avatar: Optional[str], grade: Optional[str], gender: Optional[str],
        timeout: float,
    ) -> User:
        payload = {"name": name, "avatar": avatar, "grade": grade, "gender": gender}
        data = self._request("POST", "/login", timeout, body=payload)
        created = self._parse(UserResponse.model_validate, data, "/login")
        return User(
            id=RecordId.remote(created.id),
            name=created.name,
            avatar=created.avatar,
            grade=created.grade,
            gender=created.gender,
        )

    def submit_response(
        self, user_id: RecordId, question_id: int, score: int, timeout: float,
        timestamp: Optional[datetime] = None,
    ) -> SubmitAck:
        """timestamp n'est envoyé que pour conserver l'heure d'origine (synchro)."""
        payload: Dict[str, Any] = {
            "user_id": user_id.value,
            "question_id": question_id,
            "score": score,
        }
        if timestamp is not None:
            payload["timestamp"] = timestamp.isoformat()
        data = self._request("POST", "/response", timeout, body=payload)
        ack = self._parse(ResponseAck.model_validate, data, "/response")
        return SubmitAck(id=RecordId.remote(ack.id), status=ack.status)

    def fetch_all_responses(self, timeout: float) -> List[AdminResponseRow]:
        """Lignes jointes, timestamp décroissant (ordre fixé par le serveur)."""
        data = self._request("GET", "/admin/responses", timeout)
        rows = self._parse(_admin_rows.validate_python, data, "/admin/responses")
        return [
            AdminResponseRow(
                user_id=RecordId.remote(row.user_id),
                user_name=row.user_name,
                user_avatar=row.user_avatar,
                user_grade=row.user_grade,
                user_gender=row.user_gender,
                question_id=row.question_id,
                score=row.score,
                timestamp=row.timestamp,
            )
            for row in rows
        ]

    def fetch_user_responses(self, user_id: RecordId, timeout: float) -> List[ResponseRecord]:
        """Réponses d'un utilisateur, question_id croissant (ordre fixé par le serveur)."""
        path = f"/users/{user_id.value}/responses"
        data = self._request("GET", path, timeout)
        rows = self._parse(_user_rows.validate_python, data, path)
        return [
            ResponseRecord(
                id=RecordId.remote(row.id),
                user_id=RecordId.remote(row.user_id),
                question_id=row.question_id,
                score=row.score,
                timestamp=row.timestamp,
            )
            for row in rows
        ]

    def sync_batch(
        self, users: List[Dict[str, Any]], responses: List[Dict[str, Any]], timeout: float,
    ) -> SyncResult:
        """Envoie les collections locales brutes à POST /sync (remappage côté serveur)."""
        data = self._request("POST", "/sync", timeout, body={"users": users, "responses": responses})
        result = self._parse(SyncResponse.model_validate, data, "/sync")
        return SyncResult(synced_users=result.synced_users, synced_responses=result.synced_responses)

    @staticmethod
    def _parse(validate, data: Any, path: str):
        try:
            return validate(data)
        except ValidationError as exc:
            raise RemoteUnavailableError(
                f"Réponse inattendue du serveur : {path}",
                details={"error": str(exc)},
            ) from exc
