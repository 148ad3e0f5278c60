"""
Tests de bout en bout : passerelle + synchro contre l'API réelle (SQLite en mémoire).
Scénario principal : questionnaire passé hors-ligne, synchro, puis tableau de bord
en ligne avec une synthèse par élève.
"""

from unittest.mock import MagicMock

import pytest

from moodsurvey.client.aggregator import aggregate_responses
from moodsurvey.client.exceptions import RemoteUnavailableError
from moodsurvey.client.factory import create_client
from moodsurvey.client.gateway import DataGateway
from moodsurvey.client.local_store import LocalFallbackStore, MemoryStorage
from moodsurvey.client.reconciler import SyncReconciler
from moodsurvey.client.records import Provenance
from moodsurvey.client.remote_client import RemoteStoreClient


@pytest.fixture
def remote(api_client):
    return RemoteStoreClient(http_client=api_client)


@pytest.fixture
def local():
    return LocalFallbackStore(MemoryStorage())


def offline_remote():
    remote = MagicMock(spec=RemoteStoreClient)
    for name in ("health", "create_user", "submit_response", "fetch_all_responses", "fetch_user_responses"):
        getattr(remote, name).side_effect = RemoteUnavailableError("hors ligne")
    return remote


def test_en_ligne_direct(remote, local):
    gateway = DataGateway(remote, local)
    try:
        assert gateway.check_health() is True

        user = gateway.create_user("Léa", "🐱", "CE2", "F")
        gateway.submit_response(user.id, 1, 2)
        gateway.submit_response(user.id, 2, 4)
        gateway.submit_response(user.id, 1, 5)

        result = gateway.fetch_all_responses()
        per_user = gateway.fetch_user_responses(user.id)
    finally:
        gateway.close()

    assert not user.id.is_local
    assert local.is_empty()
    assert result.source is Provenance.REMOTE
    assert [r.question_id for r in per_user.data] == [1, 1, 2]

    summary = aggregate_responses(result.data)[0]
    assert summary.answers == {1: 5, 2: 4}
    assert summary.total_score == 9


@pytest.mark.parametrize("batch", [False, True])
def test_hors_ligne_puis_synchro(remote, local, batch):
    # 1. Questionnaire hors-ligne
    offline = DataGateway(offline_remote(), local)
    try:
        lea = offline.create_user("Léa", "🐱", "CE2", "F")
        tom = offline.create_user("Tom", "🦊", "CM1", "M")
        offline.submit_response(lea.id, 1, 2)
        offline.submit_response(lea.id, 1, 5)
        offline.submit_response(tom.id, 1, 3)
        offline.submit_response(tom.id, 2, 1)
        local_view = offline.fetch_all_responses()
    finally:
        offline.close()

    assert local_view.source is Provenance.LOCAL
    assert len(local_view.data) == 4

    # 2. Synchro
    reconciler = SyncReconciler(remote, local, max_workers=1)
    result = reconciler.run_batch() if batch else reconciler.run()

    assert (result.synced_users, result.synced_responses) == (2, 4)
    assert local.is_empty()

    # 3. Tableau de bord en ligne
    online = DataGateway(remote, local)
    try:
        rows = online.fetch_all_responses()
    finally:
        online.close()

    assert rows.source is Provenance.REMOTE
    summaries = {s.name: s for s in aggregate_responses(rows.data)}
    assert summaries["Léa"].answers == {1: 5}
    assert summaries["Tom"].answers == {1: 3, 2: 1}
    assert all(not s.user_id.is_local for s in summaries.values())

    # 4. Deuxième synchro : rien à envoyer
    assert reconciler.run().synced_users == 0


def test_utilisateur_en_ligne_repond_hors_ligne(remote, local, api_client):
    """Réponse en repli d'un utilisateur distant → rattachée au bon id après synchro."""
    online = DataGateway(remote, local)
    try:
        user = online.create_user("Léa")
    finally:
        online.close()

    offline = DataGateway(offline_remote(), local)
    try:
        ack = offline.submit_response(user.id, 3, 4)
    finally:
        offline.close()
    assert ack.saved_locally

    SyncReconciler(remote, local, max_workers=1).run()

    rows = api_client.get(f"/users/{user.id.value}/responses").json()
    assert [(r["question_id"], r["score"]) for r in rows] == [(3, 4)]


def test_create_client_partage_le_stockage(api_client):
    """Passerelle et synchro assemblées depuis la configuration partagent le stockage local."""
    gateway, reconciler = create_client(storage=MemoryStorage(), http_client=api_client)
    try:
        assert gateway.local is reconciler.local
        assert gateway.remote is reconciler.remote
        assert gateway.check_health() is True
    finally:
        gateway.close()
