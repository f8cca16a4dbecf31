# cabinet/domain/models.py
"""
Modèles (dataclasses) du domaine.

Observation importante:
- Les montants sont des ``Decimal`` côté domaine et des centimes entiers
  (``prix_centimes``) côté base; la conversion est faite par les repositories.
- ``Utilisateur`` est un type unique discriminé par ``TypeUtilisateur``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Dict, List, Optional

from cabinet.domain.calendrier import nom_mois


CENTIMES = Decimal("0.01")


def arrondi_centimes(montant: Decimal) -> Decimal:
    return Decimal(montant).quantize(CENTIMES, rounding=ROUND_HALF_UP)


class TypeUtilisateur(str, Enum):
    MEDECIN = "MEDECIN"
    ASSISTANT = "ASSISTANT"

    @classmethod
    def from_str(cls, value: str) -> "TypeUtilisateur":
        for t in cls:
            if t.value == str(value).strip().upper():
                return t
        raise ValueError(f"Type d'utilisateur inconnu: {value}")


@dataclass
class Utilisateur:
    """Médecin ou assistant(e); seul le tag ``type`` les distingue."""
    login: str
    type: TypeUtilisateur
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def is_medecin(self) -> bool:
        return self.type == TypeUtilisateur.MEDECIN

    @property
    def is_assistant(self) -> bool:
        return self.type == TypeUtilisateur.ASSISTANT


@dataclass
class Patient:
    nom: str
    telephone: str
    email: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass
class Categorie:
    """Type de consultation (ex.: routine, urgence)."""
    designation: str
    description: Optional[str] = None
    id: Optional[int] = None


@dataclass
class Consultation:
    """Rendez-vous / visite avec prix et statut de paiement.

    Les champs ``patient_nom``, ``patient_telephone``, ``categorie_designation``
    et ``medecin_login`` ne sont renseignés qu'à la lecture (jointures).
    """
    date: datetime
    prix: Decimal
    patient_id: int
    categorie_id: int
    medecin_id: int
    description: Optional[str] = None
    est_payee: bool = False
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    patient_nom: Optional[str] = None
    patient_telephone: Optional[str] = None
    categorie_designation: Optional[str] = None
    medecin_login: Optional[str] = None

    def is_passee(self, maintenant: Optional[datetime] = None) -> bool:
        return self.date < (maintenant or datetime.now())

    def is_a_venir(self, maintenant: Optional[datetime] = None) -> bool:
        return self.date > (maintenant or datetime.now())


@dataclass
class BilanMensuel:
    """Bilan statistique d'un mois (calculé à la demande, jamais persisté)."""
    mois: int
    annee: int
    nombre_consultations: int = 0
    chiffre_affaires: Decimal = Decimal("0.00")
    consultations_par_categorie: Dict[str, int] = field(default_factory=dict)
    evolution_par_semaine: List[int] = field(default_factory=lambda: [0] * 5)
    consultations_payees: int = 0
    consultations_impayees: int = 0
    montant_impayes: Decimal = Decimal("0.00")

    @property
    def taux_paiement(self) -> float:
        """Pourcentage de consultations payées (0 si aucune consultation)."""
        if self.nombre_consultations == 0:
            return 0.0
        return self.consultations_payees / self.nombre_consultations * 100

    @property
    def prix_moyen(self) -> Decimal:
        """Chiffre d'affaires / nombre de consultations, arrondi au centime."""
        if self.nombre_consultations == 0:
            return Decimal("0.00")
        return arrondi_centimes(self.chiffre_affaires / self.nombre_consultations)

    @property
    def nom_mois(self) -> str:
        return nom_mois(self.mois)
