"""
Assemblage du client à partir de la configuration.
"""

from typing import Optional, Tuple

import httpx

from moodsurvey.client.gateway import DataGateway
from moodsurvey.client.local_store import JsonFileStorage, LocalFallbackStore, StoragePort
from moodsurvey.client.reconciler import SyncReconciler
from moodsurvey.client.remote_client import RemoteStoreClient
from moodsurvey.config import settings


def create_client(
    storage: Optional[StoragePort] = None,
    http_client: Optional[httpx.Client] = None,
) -> Tuple[DataGateway, SyncReconciler]:
    """
    Passerelle et réconciliateur partageant le même client distant et le même
    stockage local (donc le même verrou).
    """
    remote = RemoteStoreClient(http_client=http_client)
    local = LocalFallbackStore(storage or JsonFileStorage(settings.LOCAL_STORE_DIR))
    return DataGateway(remote, local), SyncReconciler(remote, local)
