"""
Chargement du tableau de bord admin : état du serveur, provenance des données,
synthèse par élève.
"""

import logging
from typing import List, Sequence

from pydantic import BaseModel

from moodsurvey.client.aggregator import StudentSummary, aggregate_responses
from moodsurvey.client.exceptions import DashboardLoadError, MoodSurveyClientError
from moodsurvey.client.gateway import DataGateway
from moodsurvey.client.questions import Question
from moodsurvey.client.records import Provenance
from moodsurvey.client.reconciler import pending_counts

logger = logging.getLogger(__name__)


class Dashboard(BaseModel):
    server_online: bool
    source: Provenance
    summaries: List[StudentSummary]
    total_questions: int
    pending_users: int = 0
    pending_responses: int = 0


def load_dashboard(gateway: DataGateway, questions: Sequence[Question]) -> Dashboard:
    """
    Sonde le serveur puis lit toutes les réponses (serveur ou local).
    Seul le repli local qui échoue lui aussi remonte une erreur (DashboardLoadError).
    """
    online = gateway.check_health()
    try:
        result = gateway.fetch_all_responses()
        pending_users, pending_responses = pending_counts(gateway.local)
    except (MoodSurveyClientError, OSError) as exc:
        logger.error("Impossible de charger les données : %s", exc)
        raise DashboardLoadError("Impossible de charger les données.") from exc

    summaries = aggregate_responses(result.data)
    logger.info(
        "Tableau de bord : %d élèves (%s), serveur %s",
        len(summaries), result.source.value, "en ligne" if online else "hors ligne",
    )
    return Dashboard(
        server_online=online,
        source=result.source,
        summaries=summaries,
        total_questions=len(questions),
        pending_users=pending_users,
        pending_responses=pending_responses,
    )
