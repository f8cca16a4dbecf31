# cabinet/usecases/bilan.py
"""
Cas d'usage: bilan mensuel (statistiques d'un mois).

Déroulement:
1) Valide la période (mois 1-12, année) avant toute requête.
2) Récupère les consultations du mois -> nombre total.
3) Chiffre d'affaires par une requête de somme dédiée (payées uniquement).
4) Répartition par catégorie et évolution hebdomadaire (5 semaines).
5) Parcourt les consultations: payées / impayées et montant des impayés.

Remarques:
- Une période sans consultation n'est pas une erreur: tous les compteurs
  sont à zéro.
- Une erreur d'accès aux données (DatabaseError) est journalisée puis
  propagée telle quelle, sans nouvelle tentative.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Dict, List

from cabinet.domain.calendrier import valider_periode
from cabinet.domain.models import BilanMensuel, Consultation
from cabinet.infra.repositories import ConsultationRepo
from cabinet.infra.logger import log_system_event, bilan_logger


class BilanService:
    """Calcule les bilans à partir d'un ``ConsultationRepo`` injecté."""

    def __init__(self, consultation_repo: ConsultationRepo):
        self.consultation_repo = consultation_repo

    def get_bilan_mensuel(self, mois: int, annee: int) -> BilanMensuel:
        valider_periode(mois, annee)
        log_system_event("bilan_mensuel_start", {"mois": mois, "annee": annee})

        try:
            bilan = BilanMensuel(mois=mois, annee=annee)

            consultations = self.consultation_repo.find_by_mois(mois, annee)
            bilan.nombre_consultations = len(consultations)
            bilan_logger.info(f"BILAN {mois:02d}/{annee}: {len(consultations)} consultations")

            bilan.chiffre_affaires = self.consultation_repo.chiffre_affaires(mois, annee)
            bilan.consultations_par_categorie = self.consultation_repo.stats_par_categorie(mois, annee)
            bilan.evolution_par_semaine = self.consultation_repo.evolution_par_semaine(mois, annee)

            payees = 0
            impayees = 0
            montant_impayes = Decimal("0.00")
            for c in consultations:
                if c.est_payee:
                    payees += 1
                else:
                    impayees += 1
                    montant_impayes += c.prix

            bilan.consultations_payees = payees
            bilan.consultations_impayees = impayees
            bilan.montant_impayes = montant_impayes

            log_system_event("bilan_mensuel_success", {
                "mois": mois,
                "annee": annee,
                "nombre_consultations": bilan.nombre_consultations,
                "chiffre_affaires": str(bilan.chiffre_affaires),
                "payees": payees,
                "impayees": impayees,
            })
            return bilan

        except Exception as e:
            log_system_event("bilan_mensuel_error", {
                "mois": mois,
                "annee": annee,
                "error": str(e),
            }, level="error")
            bilan_logger.error(f"BILAN {mois:02d}/{annee}: Erreur - {e}")
            raise

    def chiffre_affaires_mensuel(self, mois: int, annee: int) -> Decimal:
        valider_periode(mois, annee)
        return self.consultation_repo.chiffre_affaires(mois, annee)

    def statistiques_categorie(self, mois: int, annee: int) -> Dict[str, int]:
        valider_periode(mois, annee)
        return self.consultation_repo.stats_par_categorie(mois, annee)

    def evolution_hebdomadaire(self, mois: int, annee: int) -> List[int]:
        valider_periode(mois, annee)
        return self.consultation_repo.evolution_par_semaine(mois, annee)

    def taux_paiement(self, mois: int, annee: int) -> float:
        """Pourcentage de consultations payées du mois (0 si aucune)."""
        valider_periode(mois, annee)
        consultations = self.consultation_repo.find_by_mois(mois, annee)
        if not consultations:
            return 0.0
        payees = sum(1 for c in consultations if c.est_payee)
        return payees / len(consultations) * 100

    def evolution_consultations(self, debut: date, fin: date) -> List[Consultation]:
        """Consultations entre deux jours inclus, par date croissante."""
        return self.consultation_repo.find_between(debut, fin)
