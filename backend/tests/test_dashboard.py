"""
Tests unitaires pour le chargement du tableau de bord admin.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from moodsurvey.client.dashboard import load_dashboard
from moodsurvey.client.exceptions import DashboardLoadError, RemoteUnavailableError
from moodsurvey.client.gateway import DataGateway
from moodsurvey.client.identifiers import RecordId
from moodsurvey.client.local_store import LocalFallbackStore, MemoryStorage
from moodsurvey.client.questions import Question
from moodsurvey.client.records import AdminResponseRow, Provenance
from moodsurvey.client.remote_client import RemoteStoreClient

QUESTIONS = [Question(id=i, text=f"Question {i}") for i in (1, 2, 3)]


@pytest.fixture
def gateway():
    gw = DataGateway(MagicMock(spec=RemoteStoreClient), LocalFallbackStore(MemoryStorage()))
    yield gw
    gw.close()


def test_en_ligne(gateway):
    gateway.remote.health.return_value = True
    gateway.remote.fetch_all_responses.return_value = [
        AdminResponseRow(
            user_id=RecordId.remote(1), user_name="Léa", question_id=1, score=4,
            timestamp=datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc),
        ),
    ]

    dashboard = load_dashboard(gateway, QUESTIONS)

    assert dashboard.server_online is True
    assert dashboard.source is Provenance.REMOTE
    assert dashboard.total_questions == 3
    assert dashboard.summaries[0].progress(dashboard.total_questions) == "1/3"


def test_hors_ligne_donnees_locales(gateway):
    gateway.remote.health.side_effect = RemoteUnavailableError("hors ligne")
    gateway.remote.fetch_all_responses.side_effect = RemoteUnavailableError("hors ligne")
    user = gateway.local.add_user("Tom", None, None, None)
    gateway.local.add_response(RecordId.local(user.id), 2, 5)

    dashboard = load_dashboard(gateway, QUESTIONS)

    assert dashboard.server_online is False
    assert dashboard.source is Provenance.LOCAL
    assert dashboard.summaries[0].name == "Tom"
    assert (dashboard.pending_users, dashboard.pending_responses) == (1, 1)


def test_echec_lecture_locale_remonte(gateway):
    gateway.remote.health.return_value = False
    gateway.remote.fetch_all_responses.side_effect = RemoteUnavailableError("hors ligne")
    gateway.local.snapshot = MagicMock(side_effect=OSError("stockage illisible"))

    with pytest.raises(DashboardLoadError):
        load_dashboard(gateway, QUESTIONS)
