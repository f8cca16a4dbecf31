import logging
from datetime import datetime
from decimal import Decimal

import pytest

from cabinet.infra import logger
from cabinet.infra.logger import (
    get_log_summary,
    log_consultation,
    log_file_operation,
    log_system_event,
    log_transaction,
    set_logging,
)
from cabinet.domain.errors import DatabaseError
from cabinet.domain.models import Categorie, Consultation, Patient, TypeUtilisateur, Utilisateur
from cabinet.infra.migrations import apply_migrations
from cabinet.infra.repositories import CategorieRepo, ConsultationRepo, PatientRepo, UtilisateurRepo
from cabinet.usecases.bilan import BilanService


NOMS = {
    "transactions": "cabinet.transactions",
    "consultations": "cabinet.consultations",
    "bilan": "cabinet.bilan",
    "database": "cabinet.database",
    "system": "cabinet.system",
}


def _rediriger(fichiers):
    for cle, nom in NOMS.items():
        for h in list(logging.getLogger(nom).handlers):
            h.close()
        logger.setup_logger(nom, str(fichiers[cle]))


@pytest.fixture
def logs_tmp(tmp_path, monkeypatch):
    originaux = dict(logger.LOG_FILES)
    etat = logger.ENABLE_LOGGING
    fichiers = {cle: tmp_path / chemin.name for cle, chemin in originaux.items()}
    monkeypatch.setattr(logger, "LOGS_DIR", tmp_path)
    monkeypatch.setattr(logger, "LOG_FILES", fichiers)
    set_logging(True)
    _rediriger(fichiers)
    yield fichiers
    set_logging(False)
    _rediriger(originaux)
    set_logging(etat)


def test_logging_desactive_par_defaut(tmp_path, monkeypatch):
    monkeypatch.setattr(logger, "LOG_FILES", {"system": tmp_path / "system.log"})
    set_logging(False)
    log_system_event("rien", {})
    assert get_log_summary("system") == "Log system introuvable."


def test_logs_ecrits(logs_tmp):
    log_system_event("demarrage", {"version": "test"})
    log_transaction("valider_paiement", {"id": 1}, error="déjà payée")
    log_consultation("creer", 7, prix="150.00")
    log_file_operation("export", "bilan.xlsx", rows_processed=12)

    assert "SYSTEM_EVENT: demarrage" in get_log_summary("system")
    assert "FILE_EXPORT" in get_log_summary("system")
    assert "TRANSACTION_FAILED: valider_paiement - déjà payée" in get_log_summary("transactions")
    assert "CONSULTATION_CREER" in get_log_summary("consultations")
    assert get_log_summary("inconnu") == "Log inconnu introuvable."


def test_sixieme_semaine_signalee(logs_tmp, tmp_path):
    db_path = str(tmp_path / "juin.sqlite")
    apply_migrations(db_path)
    patient = PatientRepo(db_path).insert(Patient(nom="Omar", telephone="0655555555"))
    medecin = UtilisateurRepo(db_path).insert(Utilisateur(login="dr.o", type=TypeUtilisateur.MEDECIN))
    cat = CategorieRepo(db_path).insert(Categorie(designation="Routine"))
    ConsultationRepo(db_path).insert(Consultation(
        date=datetime(2025, 6, 30, 9), prix=Decimal("100"), patient_id=patient.id,
        categorie_id=cat.id, medecin_id=medecin.id,
    ))

    BilanService(ConsultationRepo(db_path)).get_bilan_mensuel(6, 2025)

    contenu = get_log_summary("bilan")
    assert "EVOLUTION_SEMAINE: 1 consultation(s) hors des 5 semaines" in contenu
    assert "bilan_mensuel_success" in get_log_summary("system")


def test_erreur_bilan_journalisee(logs_tmp, tmp_path):
    with pytest.raises(DatabaseError):
        BilanService(ConsultationRepo(str(tmp_path / "absente.sqlite"))).get_bilan_mensuel(1, 2024)
    assert "Erreur" in get_log_summary("bilan")
    assert "bilan_mensuel_error" in get_log_summary("system")


def test_log_summary_zero_ligne(logs_tmp):
    log_system_event("demarrage", {})
    assert get_log_summary("system", 0) == ""
    assert get_log_summary("system", -3) == ""
    assert get_log_summary("system", 1).count("\n") == 1
