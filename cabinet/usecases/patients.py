# cabinet/usecases/patients.py
"""
Cas d'usage: dossiers patients.

- le téléphone est unique; l'email aussi quand il est renseigné;
- supprimer un patient supprime ses consultations (ON DELETE CASCADE).
"""

from __future__ import annotations

from typing import List, Optional

from cabinet.domain.errors import BusinessError, NotFoundError
from cabinet.domain.models import Patient
from cabinet.infra.repositories import PatientRepo
from cabinet.infra.logger import log_database_operation, log_transaction


class PatientService:
    def __init__(self, patient_repo: PatientRepo):
        self.patient_repo = patient_repo

    def _verifier_unicite(self, patient: Patient) -> None:
        par_tel = self.patient_repo.find_by_telephone(patient.telephone)
        if par_tel is not None and par_tel.id != patient.id:
            raise BusinessError("Un autre patient a déjà ce numéro de téléphone.")
        if patient.email:
            par_email = self.patient_repo.find_by_email(patient.email)
            if par_email is not None and par_email.id != patient.id:
                raise BusinessError("Un autre patient a déjà cet email.")

    def creer_patient(self, patient: Patient) -> Patient:
        self._verifier_unicite(patient)
        self.patient_repo.insert(patient)
        log_database_operation("patient", "INSERT", 1, patient_id=patient.id)
        return patient

    def get_patient(self, patient_id: int) -> Patient:
        patient = self.patient_repo.get(patient_id)
        if patient is None:
            raise NotFoundError("Patient", patient_id)
        return patient

    def lister(self) -> List[Patient]:
        return self.patient_repo.find_all()

    def rechercher(self, critere: Optional[str]) -> List[Patient]:
        """Tous les patients si le critère est vide."""
        if not (critere or "").strip():
            return self.lister()
        return self.patient_repo.search(critere)

    def compter(self) -> int:
        return self.patient_repo.count()

    def modifier_patient(self, patient: Patient) -> Patient:
        self.get_patient(patient.id)
        self._verifier_unicite(patient)
        self.patient_repo.update(patient)
        log_database_operation("patient", "UPDATE", 1, patient_id=patient.id)
        return patient

    def supprimer_patient(self, patient_id: int) -> bool:
        self.get_patient(patient_id)
        ok = self.patient_repo.delete(patient_id)
        log_database_operation("patient", "DELETE", int(ok), patient_id=patient_id)
        log_transaction("supprimer_patient", {"id": patient_id}, result=ok)
        return ok
