"""
Tests unitaires pour le stockage local de secours.
Couverture : unicité des ids locaux, régions corrompues lues comme vides,
persistance fichier, retrait ciblé après synchro, écritures concurrentes.
"""

import json
import threading
from datetime import datetime, timezone

import pytest

from moodsurvey.client.identifiers import Origin, RecordId
from moodsurvey.client.local_store import (
    RESPONSES_KEY,
    USERS_KEY,
    JsonFileStorage,
    JsonStorage,
    LocalFallbackStore,
    MemoryStorage,
)

FIXED_NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


def make_store(raw=None, clock=lambda: 1772442000.0) -> LocalFallbackStore:
    return LocalFallbackStore(MemoryStorage(raw), clock=clock, now=lambda: FIXED_NOW)


# ============================================================
# Ids locaux
# ============================================================

def test_id_derive_de_horloge():
    user = make_store().add_user("Léa", "🐱", "CE2", "F")
    assert user.id == 1772442000000


def test_ids_uniques_horloge_figee():
    """Horloge qui n'avance pas → ids tout de même distincts."""
    store = make_store()
    ids = [store.add_user(f"U{i}", None, None, None).id for i in range(50)]

    assert len(set(ids)) == 50
    assert ids == sorted(ids)


def test_ids_uniques_malgre_donnees_existantes():
    """Un id déjà présent dans la collection n'est jamais réattribué."""
    existing = json.dumps([{"id": 1772442000005, "name": "Ancien"}])
    store = make_store(raw={USERS_KEY: existing})

    user = store.add_user("Nouveau", None, None, None)

    assert user.id == 1772442000006


def test_horloge_qui_recule():
    ticks = iter([1772442000.0, 1772441000.0])
    store = make_store(clock=lambda: next(ticks))

    first = store.add_user("A", None, None, None)
    second = store.add_user("B", None, None, None)

    assert second.id > first.id


# ============================================================
# Réponses
# ============================================================

def test_add_response_timestamp_courant():
    store = make_store()
    response = store.add_response(user_id=RecordId.local(1), question_id=2, score=4)

    assert response.timestamp == FIXED_NOW
    assert store.responses()[0].score == 4


def test_ordre_insertion_conserve():
    store = make_store()
    store.add_response(RecordId.local(1), 1, 2)
    store.add_response(RecordId.local(1), 2, 3)

    assert [r.question_id for r in store.responses()] == [1, 2]


# ============================================================
# Régions absentes / corrompues
# ============================================================

def test_regions_absentes_vides():
    store = make_store()
    assert store.users() == []
    assert store.responses() == []
    assert store.is_empty()


def test_json_invalide_lu_comme_vide():
    store = make_store(raw={USERS_KEY: "{pas du json", RESPONSES_KEY: "42"})
    assert store.users() == []
    assert store.responses() == []


def test_enregistrement_invalide_ignore():
    raw = json.dumps([{"id": 1, "name": "Léa"}, {"id": "x"}, "texte", {"name": "sans id"}])
    store = make_store(raw={USERS_KEY: raw})

    assert [u.name for u in store.users()] == ["Léa"]


def test_ajout_sur_region_corrompue():
    store = make_store(raw={RESPONSES_KEY: "corrompu"})
    store.add_response(RecordId.local(1), 1, 5)

    assert len(store.responses()) == 1


# ============================================================
# Vidage
# ============================================================

def test_clear():
    store = make_store()
    store.add_user("Léa", None, None, None)
    store.add_response(RecordId.local(1), 1, 5)

    store.clear()

    assert store.is_empty()


def test_discard_conserve_nouveaux_enregistrements():
    """Seuls les enregistrements synchronisés sont retirés."""
    store = make_store()
    synced_user = store.add_user("Léa", None, None, None)
    synced_resp = store.add_response(RecordId.local(synced_user.id), 1, 5)
    late_resp = store.add_response(RecordId.local(synced_user.id), 2, 3)

    store.discard([synced_user.id], [synced_resp.id])

    assert store.users() == []
    assert [r.id for r in store.responses()] == [late_resp.id]


def test_discard_tout_supprime_les_regions():
    storage = MemoryStorage()
    store = LocalFallbackStore(storage)
    user = store.add_user("Léa", None, None, None)

    store.discard([user.id], [])

    assert USERS_KEY not in storage.raw


def test_discard_supprime_les_enregistrements_illisibles():
    """Un enregistrement invalide ne peut jamais être envoyé : il part avec la synchro."""
    raw = {RESPONSES_KEY: json.dumps([{"id": "abc", "score": 3}])}
    storage = MemoryStorage(raw)
    store = LocalFallbackStore(storage)
    user = store.add_user("Léa", None, None, None)

    store.discard([user.id], [])

    assert storage.raw == {}


def test_discard_garde_ecriture_valide_a_cote_des_illisibles():
    store = make_store(raw={RESPONSES_KEY: json.dumps([{"id": "abc"}, "texte"])})
    late = store.add_response(RecordId.local(1), 2, 4)

    store.discard([], [])

    assert [r.id for r in store.responses()] == [late.id]
    assert len(json.loads(store.storage.raw[RESPONSES_KEY])) == 1


# ============================================================
# Persistance fichier
# ============================================================

def test_fichier_persiste_entre_instances(tmp_path):
    first = LocalFallbackStore(JsonFileStorage(str(tmp_path / "local")))
    user = first.add_user("Léa", "🐱", "CE2", "F")
    first.add_response(RecordId.local(user.id), 1, 4)

    second = LocalFallbackStore(JsonFileStorage(str(tmp_path / "local")))

    assert [u.id for u in second.users()] == [user.id]
    assert second.responses()[0].user_id == user.id
    assert (tmp_path / "local" / "sel_users.json").exists()


def test_fichier_corrompu_lu_comme_vide(tmp_path):
    (tmp_path / "sel_users.json").write_text("\x00\x01", encoding="utf-8")
    store = LocalFallbackStore(JsonFileStorage(str(tmp_path)))

    assert store.users() == []


def test_fichier_clear(tmp_path):
    store = LocalFallbackStore(JsonFileStorage(str(tmp_path)))
    store.add_user("Léa", None, None, None)

    store.clear()

    assert not (tmp_path / "sel_users.json").exists()


# ============================================================
# Concurrence
# ============================================================

def test_ecritures_concurrentes_sans_perte():
    """Lecture-modification-écriture sous verrou : aucune écriture perdue."""
    store = make_store()

    def worker(n):
        for q in range(20):
            store.add_response(RecordId.local(n), q + 1, 3)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    responses = store.responses()
    assert len(responses) == 160
    assert len({r.id for r in responses}) == 160


# ============================================================
# Origine de l'utilisateur
# ============================================================

def test_origine_utilisateur_conservee():
    """Utilisateur créé en ligne qui répond hors-ligne : id distant mémorisé comme tel."""
    store = make_store()
    store.add_response(RecordId.remote(3), 1, 4)

    stored = store.responses()[0]
    assert stored.user_origin is Origin.REMOTE
    assert stored.owner == RecordId.remote(3)


def test_origine_absente_consideree_locale():
    raw = json.dumps([{
        "id": 1, "user_id": 1772442000000, "question_id": 1, "score": 3,
        "timestamp": "2026-03-02T09:00:00+00:00",
    }])
    store = make_store(raw={RESPONSES_KEY: raw})

    assert store.responses()[0].owner == RecordId.local(1772442000000)


def test_stockage_json_abstrait():
    with pytest.raises(TypeError):
        JsonStorage()
