# cabinet/usecases/consultations.py
"""
Cas d'usage: cycle de vie des consultations.

Règles:
- une consultation est créée non payée, à une date future, avec un prix > 0;
- le patient, la catégorie et le médecin doivent exister; le médecin doit
  être un utilisateur de type MEDECIN;
- un patient ne peut pas avoir deux consultations à moins de
  ``creneau_minutes`` d'intervalle;
- le paiement est une transition à sens unique (pas d'annulation de paiement);
- une consultation passée ne peut être ni modifiée ni annulée.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Callable, List, Optional

from cabinet.config import DEFAULTS
from cabinet.domain.errors import BusinessError, NotFoundError, ValidationError
from cabinet.domain.models import Consultation
from cabinet.infra.repositories import (
    CategorieRepo,
    ConsultationRepo,
    ParamsRepo,
    PatientRepo,
    UtilisateurRepo,
)
from cabinet.infra.logger import (
    log_transaction, log_consultation, log_database_operation, log_system_event
)


class ConsultationService:
    def __init__(
        self,
        consultation_repo: ConsultationRepo,
        patient_repo: PatientRepo,
        categorie_repo: CategorieRepo,
        utilisateur_repo: UtilisateurRepo,
        params_repo: Optional[ParamsRepo] = None,
        horloge: Callable[[], datetime] = datetime.now,
    ):
        self.consultation_repo = consultation_repo
        self.patient_repo = patient_repo
        self.categorie_repo = categorie_repo
        self.utilisateur_repo = utilisateur_repo
        self.params_repo = params_repo
        self.horloge = horloge

    @classmethod
    def from_db(cls, db_path: str, **kwargs) -> "ConsultationService":
        return cls(
            ConsultationRepo(db_path),
            PatientRepo(db_path),
            CategorieRepo(db_path),
            UtilisateurRepo(db_path),
            ParamsRepo(db_path),
            **kwargs,
        )

    def _creneau_minutes(self) -> int:
        if self.params_repo is None:
            return DEFAULTS.creneau_minutes
        return self.params_repo.get_int("creneau_minutes", DEFAULTS.creneau_minutes)

    # ---------------------
    # validations internes
    # ---------------------

    def _valider(self, c: Consultation, nouvelle: bool) -> None:
        if c.date is None:
            raise ValidationError("date", "La date est obligatoire.")
        if nouvelle and c.date < self.horloge():
            raise ValidationError("date", "La date ne peut pas être dans le passé.")
        if c.prix is None or Decimal(c.prix) <= 0:
            raise ValidationError("prix", "Le prix doit être supérieur à 0.")

    def _verifier_references(self, c: Consultation) -> None:
        if self.patient_repo.get(c.patient_id) is None:
            raise NotFoundError("Patient", c.patient_id)
        if self.categorie_repo.get(c.categorie_id) is None:
            raise NotFoundError("Catégorie", c.categorie_id)
        medecin = self.utilisateur_repo.get(c.medecin_id)
        if medecin is None:
            raise NotFoundError("Médecin", c.medecin_id)
        if not medecin.is_medecin:
            raise BusinessError(f"L'utilisateur {medecin.login} n'est pas un médecin.")

    def _existante(self, consultation_id: int) -> Consultation:
        existing = self.consultation_repo.get(consultation_id)
        if existing is None:
            raise NotFoundError("Consultation", consultation_id)
        return existing

    # ---------------------
    # écriture
    # ---------------------

    def creer_consultation(self, consultation: Consultation) -> Consultation:
        log_system_event("creer_consultation_start", {"patient_id": consultation.patient_id})
        try:
            self._valider(consultation, nouvelle=True)
            self._verifier_references(consultation)
            if not self.consultation_repo.is_creneau_disponible(
                consultation.patient_id, consultation.date, self._creneau_minutes()
            ):
                raise BusinessError("Le patient a déjà une consultation à cette heure.")

            consultation.est_payee = False
            self.consultation_repo.insert(consultation)
            log_database_operation("consultation", "INSERT", 1, consultation_id=consultation.id)
            log_consultation("creer", consultation.id, date=str(consultation.date), prix=str(consultation.prix))
            log_transaction("creer_consultation", {"patient_id": consultation.patient_id}, result=consultation.id)
            return consultation
        except Exception as e:
            log_transaction("creer_consultation", {"patient_id": consultation.patient_id}, error=str(e))
            raise

    def modifier_consultation(self, consultation: Consultation) -> Consultation:
        """Modifie date, description, prix et références; jamais le paiement."""
        try:
            existing = self._existante(consultation.id)
            if existing.is_passee(self.horloge()):
                raise BusinessError("Impossible de modifier une consultation passée.")
            self._valider(consultation, nouvelle=False)
            self._verifier_references(consultation)
            if not self.consultation_repo.is_creneau_disponible(
                consultation.patient_id, consultation.date, self._creneau_minutes(), exclure_id=consultation.id
            ):
                raise BusinessError("Le patient a déjà une consultation à cette heure.")
            self.consultation_repo.update(consultation)
            consultation.est_payee = existing.est_payee
            log_consultation("modifier", consultation.id, date=str(consultation.date))
            log_transaction("modifier_consultation", {"id": consultation.id}, result="success")
            return consultation
        except Exception as e:
            log_transaction("modifier_consultation", {"id": consultation.id}, error=str(e))
            raise

    def annuler_consultation(self, consultation_id: int) -> bool:
        try:
            existing = self._existante(consultation_id)
            if existing.is_passee(self.horloge()):
                raise BusinessError("Impossible d'annuler une consultation passée.")
            ok = self.consultation_repo.delete(consultation_id)
            log_database_operation("consultation", "DELETE", int(ok), consultation_id=consultation_id)
            log_consultation("annuler", consultation_id)
            return ok
        except Exception as e:
            log_transaction("annuler_consultation", {"id": consultation_id}, error=str(e))
            raise

    def valider_paiement(self, consultation_id: int) -> bool:
        try:
            existing = self._existante(consultation_id)
            if existing.est_payee:
                raise BusinessError("Cette consultation est déjà payée.")
            ok = self.consultation_repo.valider_paiement(consultation_id)
            log_consultation("paiement", consultation_id, prix=str(existing.prix))
            log_transaction("valider_paiement", {"id": consultation_id}, result=ok)
            return ok
        except Exception as e:
            log_transaction("valider_paiement", {"id": consultation_id}, error=str(e))
            raise

    # ---------------------
    # lecture
    # ---------------------

    def get_consultation(self, consultation_id: int) -> Consultation:
        return self._existante(consultation_id)

    def lister(self) -> List[Consultation]:
        return self.consultation_repo.find_all()

    def consultations_du_jour(self, jour: date) -> List[Consultation]:
        return self.consultation_repo.find_by_date(jour)

    def consultations_journalieres(self, medecin_id: int, jour: date) -> List[Consultation]:
        return self.consultation_repo.find_by_medecin_and_date(medecin_id, jour)

    def consultations_futures_medecin(self, medecin_id: int) -> List[Consultation]:
        """Consultations du médecin à partir d'aujourd'hui, par date croissante."""
        aujourd_hui = self.horloge().date()
        return [
            c for c in self.consultation_repo.find_by_medecin(medecin_id)
            if c.date.date() >= aujourd_hui
        ]

    def consultations_patient(self, patient_id: int) -> List[Consultation]:
        return self.consultation_repo.find_by_patient(patient_id)

    def consultations_non_payees(self) -> List[Consultation]:
        return self.consultation_repo.find_non_payees()

    def patients_a_relancer(self, jour: Optional[date] = None) -> List[Consultation]:
        """Consultations des deux jours suivant ``jour`` (aujourd'hui par défaut)."""
        return self.consultation_repo.find_for_relance(jour or self.horloge().date())

    def consultations_du_mois(self, mois: int, annee: int) -> List[Consultation]:
        return self.consultation_repo.find_by_mois(mois, annee)
