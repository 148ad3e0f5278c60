"""
Identifiants étiquetés par leur origine.

Les ids locaux (horodatage client) et les ids serveur (auto-incrément) sont deux
espaces disjoints : un même entier peut désigner deux utilisateurs différents.
Ils ne sont unifiés qu'au moment de la synchronisation, via IdMap.
"""

import logging
from enum import Enum
from typing import Dict

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class Origin(str, Enum):
    LOCAL = "local"
    REMOTE = "remote"


class RecordId(BaseModel):
    """Entier + origine. Immuable et hashable (clé de dictionnaire)."""

    origin: Origin
    value: int

    model_config = {"frozen": True}

    @classmethod
    def local(cls, value: int) -> "RecordId":
        return cls(origin=Origin.LOCAL, value=value)

    @classmethod
    def remote(cls, value: int) -> "RecordId":
        return cls(origin=Origin.REMOTE, value=value)

    @property
    def is_local(self) -> bool:
        return self.origin is Origin.LOCAL

    def __str__(self) -> str:
        return f"{self.origin.value}:{self.value}"


# Utilisateur introuvable lors de la jointure locale
UNKNOWN_LOCAL_USER = RecordId.local(-1)


class IdMap:
    """
    Table id local → id serveur, reconstruite à chaque synchronisation, jamais persistée.
    """

    def __init__(self):
        self._mapping: Dict[RecordId, RecordId] = {}

    def record(self, local_id: RecordId, remote_id: RecordId) -> None:
        if not local_id.is_local or remote_id.is_local:
            raise ValueError(f"Mapping invalide : {local_id} → {remote_id}")
        self._mapping[local_id] = remote_id

    def resolve(self, record_id: RecordId) -> RecordId:
        """
        Retourne l'id serveur correspondant. Un id déjà distant est retourné tel quel ;
        un id local absent de la table est aussi retourné tel quel (avec avertissement).
        """
        if not record_id.is_local:
            return record_id
        mapped = self._mapping.get(record_id)
        if mapped is None:
            logger.warning("Id local %s absent de la table de synchro, conservé tel quel", record_id)
            return record_id
        return mapped

    def __len__(self) -> int:
        return len(self._mapping)
