"""
Stockage local de secours (offline).

Deux régions nommées, lues et écrites en entier (pas d'accès indexé) :
- sel_users     : utilisateurs créés hors-ligne
- sel_responses : réponses enregistrées hors-ligne

Le stockage est injecté (StoragePort) ; LocalFallbackStore sérialise chaque
lecture-modification-écriture derrière un verrou, car les écritures en arrière-plan
tournent sur un pool de threads.
"""

import json
import logging
import threading
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol

from pydantic import BaseModel, ValidationError

from moodsurvey.client.identifiers import Origin, RecordId

logger = logging.getLogger(__name__)

USERS_KEY = "sel_users"
RESPONSES_KEY = "sel_responses"


class StoragePort(Protocol):
    """Accès clé/valeur durable : une collection d'enregistrements par nom."""

    def get_collection(self, name: str) -> List[Dict[str, Any]]: ...

    def set_collection(self, name: str, records: List[Dict[str, Any]]) -> None: ...

    def remove_collection(self, name: str) -> None: ...


class JsonStorage(ABC):
    """
    Sérialisation JSON commune. Une région absente ou corrompue est lue comme
    une collection vide (jamais une erreur fatale).
    """

    @abstractmethod
    def _read(self, name: str) -> Optional[str]:
        ...

    @abstractmethod
    def _write(self, name: str, text: str) -> None:
        ...

    @abstractmethod
    def _delete(self, name: str) -> None:
        ...

    def get_collection(self, name: str) -> List[Dict[str, Any]]:
        text = self._read(name)
        if not text:
            return []
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            logger.warning("Région locale %s corrompue (JSON invalide), lue comme vide", name)
            return []
        if not isinstance(data, list):
            logger.warning("Région locale %s corrompue (pas une liste), lue comme vide", name)
            return []
        return [item for item in data if isinstance(item, dict)]

    def set_collection(self, name: str, records: List[Dict[str, Any]]) -> None:
        self._write(name, json.dumps(records, ensure_ascii=False))

    def remove_collection(self, name: str) -> None:
        self._delete(name)


class MemoryStorage(JsonStorage):
    """Stockage en mémoire (tests, sessions éphémères). raw : contenu initial brut."""

    def __init__(self, raw: Optional[Dict[str, str]] = None):
        self.raw: Dict[str, str] = dict(raw or {})

    def _read(self, name: str) -> Optional[str]:
        return self.raw.get(name)

    def _write(self, name: str, text: str) -> None:
        self.raw[name] = text

    def _delete(self, name: str) -> None:
        self.raw.pop(name, None)


class JsonFileStorage(JsonStorage):
    """Un fichier <nom>.json par région dans un répertoire."""

    def __init__(self, directory: str):
        self.directory = Path(directory)

    def _path(self, name: str) -> Path:
        return self.directory / f"{name}.json"

    def _read(self, name: str) -> Optional[str]:
        path = self._path(name)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Lecture impossible de %s : %s", path, exc)
            return None

    def _write(self, name: str, text: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(name)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(text, encoding="utf-8")
        tmp.replace(path)

    def _delete(self, name: str) -> None:
        self._path(name).unlink(missing_ok=True)


class LocalUser(BaseModel):
    id: int
    name: str
    avatar: Optional[str] = None
    grade: Optional[str] = None
    gender: Optional[str] = None


class LocalResponse(BaseModel):
    id: int
    user_id: int
    # Un utilisateur créé en ligne peut répondre hors-ligne : son id est alors distant
    user_origin: Origin = Origin.LOCAL
    question_id: int
    score: int
    timestamp: datetime

    @property
    def owner(self) -> RecordId:
        return RecordId(origin=self.user_origin, value=self.user_id)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LocalFallbackStore:
    """
    Utilisateurs et réponses en attente de synchronisation.

    Ids locaux : horloge en millisecondes, forcée au-delà du plus grand id déjà
    attribué si l'horloge n'a pas avancé (unicité dans la collection).
    """

    def __init__(
        self,
        storage: StoragePort,
        clock: Callable[[], float] = time.time,
        now: Callable[[], datetime] = _utcnow,
    ):
        self.storage = storage
        self._clock = clock
        self._now = now
        self._lock = threading.RLock()
        self._last_id = 0

    def _next_id(self, existing: List[Dict[str, Any]]) -> int:
        candidate = int(self._clock() * 1000)
        floor = max([self._last_id] + [r["id"] for r in existing if isinstance(r.get("id"), int)])
        if candidate <= floor:
            candidate = floor + 1
        self._last_id = candidate
        return candidate

    # --- Écritures ---

    def add_user(
        self, name: str, avatar: Optional[str], grade: Optional[str], gender: Optional[str],
    ) -> LocalUser:
        with self._lock:
            records = self.storage.get_collection(USERS_KEY)
            user = LocalUser(
                id=self._next_id(records), name=name, avatar=avatar, grade=grade, gender=gender,
            )
            records.append(user.model_dump(mode="json"))
            self.storage.set_collection(USERS_KEY, records)
        logger.info("Utilisateur enregistré localement : id=%s", user.id)
        return user

    def add_response(self, user_id: RecordId, question_id: int, score: int) -> LocalResponse:
        with self._lock:
            records = self.storage.get_collection(RESPONSES_KEY)
            response = LocalResponse(
                id=self._next_id(records),
                user_id=user_id.value,
                user_origin=user_id.origin,
                question_id=question_id,
                score=score,
                timestamp=self._now(),
            )
            records.append(response.model_dump(mode="json"))
            self.storage.set_collection(RESPONSES_KEY, records)
        logger.info(
            "Réponse enregistrée localement : user=%s question=%s", user_id, question_id,
        )
        return response

    def clear(self) -> None:
        with self._lock:
            self.storage.remove_collection(USERS_KEY)
            self.storage.remove_collection(RESPONSES_KEY)
        logger.info("Stockage local vidé")

    def discard(self, user_ids: List[int], response_ids: List[int]) -> None:
        """
        Retire les enregistrements synchronisés et ceux qui sont illisibles
        (jamais envoyables). Une écriture locale valide arrivée pendant la synchro
        reste en attente pour la suivante.
        """
        regions = (
            (USERS_KEY, LocalUser, set(user_ids)),
            (RESPONSES_KEY, LocalResponse, set(response_ids)),
        )
        with self._lock:
            for key, model, done in regions:
                remaining = []
                for record in self.storage.get_collection(key):
                    parsed = _parse_or_none(model, record)
                    if parsed is None:
                        logger.warning("Enregistrement local invalide supprimé de %s : %s", key, record)
                        continue
                    if parsed.id in done:
                        continue
                    remaining.append(record)
                if remaining:
                    self.storage.set_collection(key, remaining)
                else:
                    self.storage.remove_collection(key)

    # --- Lectures ---

    def users(self) -> List[LocalUser]:
        with self._lock:
            records = self.storage.get_collection(USERS_KEY)
        return _validate_all(LocalUser, records, USERS_KEY)

    def responses(self) -> List[LocalResponse]:
        with self._lock:
            records = self.storage.get_collection(RESPONSES_KEY)
        return _validate_all(LocalResponse, records, RESPONSES_KEY)

    def snapshot(self):
        """Lecture cohérente des deux régions (utilisateurs, réponses)."""
        with self._lock:
            return self.users(), self.responses()

    def is_empty(self) -> bool:
        users, responses = self.snapshot()
        return not users and not responses


def _parse_or_none(model, record: Dict[str, Any]):
    try:
        return model.model_validate(record)
    except ValidationError:
        return None


def _validate_all(model, records: List[Dict[str, Any]], region: str):
    items = []
    for record in records:
        try:
            items.append(model.model_validate(record))
        except ValidationError:
            logger.warning("Enregistrement local invalide ignoré dans %s : %s", region, record)
    return items
