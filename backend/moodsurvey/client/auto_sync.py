"""
Synchronisation automatique périodique (APScheduler).

Toutes les AUTO_SYNC_INTERVAL_MINUTES minutes : si des données locales sont en
attente et que le serveur répond, lance la synchro. Un échec est journalisé ;
la tentative suivante repartira des mêmes données locales.
"""

import logging
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler

from moodsurvey.client.exceptions import SyncFailedError
from moodsurvey.client.gateway import DataGateway
from moodsurvey.client.reconciler import SyncReconciler
from moodsurvey.config import settings

logger = logging.getLogger(__name__)

JOB_ID = "local_to_server_sync"


def sync_if_online(gateway: DataGateway, reconciler: SyncReconciler) -> None:
    """Tâche planifiée ; n'émet jamais d'exception vers le planificateur."""
    if gateway.local.is_empty():
        return
    if not gateway.check_health():
        logger.debug("Synchro automatique reportée : serveur hors ligne")
        return
    try:
        result = reconciler.run()
        logger.info(
            "Synchro automatique : %d utilisateurs, %d réponses",
            result.synced_users, result.synced_responses,
        )
    except SyncFailedError as exc:
        logger.error("Synchro automatique échouée : %s", exc)


def start_auto_sync(
    gateway: DataGateway,
    reconciler: SyncReconciler,
    interval_minutes: Optional[int] = None,
) -> Optional[BackgroundScheduler]:
    """Démarre le planificateur ; retourne None si l'intervalle vaut 0 (désactivé)."""
    minutes = settings.AUTO_SYNC_INTERVAL_MINUTES if interval_minutes is None else interval_minutes
    if minutes <= 0:
        logger.info("Synchro automatique désactivée.")
        return None

    scheduler = BackgroundScheduler()
    scheduler.add_job(
        sync_if_online,
        trigger="interval",
        minutes=minutes,
        args=[gateway, reconciler],
        id=JOB_ID,
        replace_existing=True,
        max_instances=1,
    )
    scheduler.start()
    logger.info("Synchro automatique démarrée — toutes les %d minutes.", minutes)
    return scheduler


def stop_auto_sync(scheduler: Optional[BackgroundScheduler]) -> None:
    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Synchro automatique arrêtée.")
