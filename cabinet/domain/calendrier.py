"""
Utilitaires de calendrier pour les bilans mensuels.

Fonctions pures, sans accès à la base:
- validation d'une période (mois, année);
- bornes d'un mois sous forme d'intervalle semi-ouvert;
- numéro de semaine d'une date à l'intérieur de son mois;
- noms des mois en français.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import List, Tuple, Union

from cabinet.domain.errors import ValidationError


MOIS_NOMS: List[str] = [
    "Janvier", "Février", "Mars", "Avril", "Mai", "Juin",
    "Juillet", "Août", "Septembre", "Octobre", "Novembre", "Décembre",
]


def nom_mois(mois: int) -> str:
    """Nom français du mois (1-12), ``'Inconnu'`` hors plage."""
    if isinstance(mois, int) and 1 <= mois <= 12:
        return MOIS_NOMS[mois - 1]
    return "Inconnu"


def valider_periode(mois: int, annee: int) -> Tuple[int, int]:
    """Valide une période de bilan.

    Args:
        mois: Mois, entier entre 1 et 12.
        annee: Année, entier entre 1 et 9999.

    Returns:
        Le couple ``(mois, annee)`` inchangé.

    Raises:
        ValidationError: si l'un des deux champs est invalide.
    """
    if isinstance(mois, bool) or not isinstance(mois, int):
        raise ValidationError("mois", f"Le mois doit être un entier, reçu: {mois!r}")
    if not 1 <= mois <= 12:
        raise ValidationError("mois", f"Le mois doit être compris entre 1 et 12, reçu: {mois}")
    if isinstance(annee, bool) or not isinstance(annee, int):
        raise ValidationError("annee", f"L'année doit être un entier, reçu: {annee!r}")
    if not 1 <= annee <= 9999:
        raise ValidationError("annee", f"Année hors plage: {annee}")
    return mois, annee


def bornes_mois(mois: int, annee: int) -> Tuple[datetime, datetime]:
    """Retourne ``[debut, fin)`` : 1er du mois à 00:00 et 1er du mois suivant à 00:00."""
    debut = datetime(annee, mois, 1)
    if mois == 12:
        if annee == 9999:
            # pas de mois suivant représentable
            return debut, datetime.max
        fin = datetime(annee + 1, 1, 1)
    else:
        fin = datetime(annee, mois + 1, 1)
    return debut, fin


def lundi_de_la_semaine(d: date) -> date:
    return d - timedelta(days=d.weekday())


def semaine_du_mois(d: Union[date, datetime]) -> int:
    """Numéro (1-based) de la semaine de ``d`` dans son mois.

    Semaines commençant le lundi: la semaine 1 est celle qui contient le
    1er du mois. Équivaut à « semaine de l'année de ``d`` moins semaine de
    l'année du 1er du mois, plus un ». Le résultat va de 1 à 6.
    """
    if isinstance(d, datetime):
        d = d.date()
    premier = d.replace(day=1)
    return (d - lundi_de_la_semaine(premier)).days // 7 + 1
