# cabinet/usecases/rapport_bilan.py
"""
Mise en forme d'un bilan mensuel pour l'affichage.

Fonctions pures (aucun accès base ni fichier):
- lignes_bilan:        rapport texte complet (liste de lignes)
- tableau_synthese:    libellé / valeur
- tableau_categories:  consultations par catégorie
- tableau_evolution:   consultations par semaine (toujours 5 lignes)
- resume_bilan:        résumé sur une ligne

Les tableaux suivent le format ``(colonnes, lignes, message)``; ``message``
vaut None quand il y a des données, sinon le texte à afficher à la place.
Les états vides sont toujours rendus explicitement.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Tuple

from cabinet.config import DEFAULTS
from cabinet.domain.models import BilanMensuel


AUCUNE_DONNEE = "Aucune donnée"
AUCUNE_CONSULTATION = "Aucune consultation sur la période."
HORS_SEMAINES = "{} consultation(s) hors des {} semaines affichées."

_DOUBLE = "═" * 51
_SIMPLE = "─" * 51

Tableau = Tuple[List[str], List[list], Optional[str]]


def format_montant(montant: Decimal, devise: str = DEFAULTS.devise) -> str:
    return f"{Decimal(montant):.2f} {devise}"


def format_taux(taux: float) -> str:
    return f"{taux:.1f}%"


def lignes_bilan(bilan: BilanMensuel, devise: str = DEFAULTS.devise) -> List[str]:
    lignes = [
        _DOUBLE,
        f"        BILAN MENSUEL - {bilan.nom_mois} {bilan.annee}",
        _DOUBLE,
        "",
        "📊 STATISTIQUES GÉNÉRALES",
        _SIMPLE,
    ]
    if bilan.nombre_consultations == 0:
        lignes.append(f"   {AUCUNE_CONSULTATION}")
    lignes += [
        f"   Nombre total de consultations : {bilan.nombre_consultations}",
        f"   Chiffre d'affaires            : {format_montant(bilan.chiffre_affaires, devise)}",
        f"   Prix moyen par consultation   : {format_montant(bilan.prix_moyen, devise)}",
        "",
        "💰 STATISTIQUES DE PAIEMENT",
        _SIMPLE,
        f"   Consultations payées          : {bilan.consultations_payees}",
        f"   Consultations impayées        : {bilan.consultations_impayees}",
        f"   Montant des impayés           : {format_montant(bilan.montant_impayes, devise)}",
        f"   Taux de paiement              : {format_taux(bilan.taux_paiement)}",
        "",
        "📋 CONSULTATIONS PAR CATÉGORIE",
        _SIMPLE,
    ]
    if bilan.consultations_par_categorie:
        for designation, nombre in bilan.consultations_par_categorie.items():
            lignes.append(f"   • {designation}: {nombre}")
    else:
        lignes.append(f"   {AUCUNE_DONNEE}")

    lignes += [
        "",
        "📈 ÉVOLUTION PAR SEMAINE",
        _SIMPLE,
    ]
    for i, nombre in enumerate(bilan.evolution_par_semaine, start=1):
        lignes.append(f"   Semaine {i} : {nombre}")
    hors_plage = bilan.nombre_consultations - sum(bilan.evolution_par_semaine)
    if hors_plage > 0:
        lignes.append("   " + HORS_SEMAINES.format(hors_plage, len(bilan.evolution_par_semaine)))
    return lignes


def tableau_synthese(bilan: BilanMensuel, devise: str = DEFAULTS.devise) -> Tableau:
    columns = ["Indicateur", "Valeur"]
    rows = [
        ["Nombre total de consultations", str(bilan.nombre_consultations)],
        ["Chiffre d'affaires", format_montant(bilan.chiffre_affaires, devise)],
        ["Prix moyen par consultation", format_montant(bilan.prix_moyen, devise)],
        ["Consultations payées", str(bilan.consultations_payees)],
        ["Consultations impayées", str(bilan.consultations_impayees)],
        ["Montant des impayés", format_montant(bilan.montant_impayes, devise)],
        ["Taux de paiement", format_taux(bilan.taux_paiement)],
    ]
    msg = AUCUNE_CONSULTATION if bilan.nombre_consultations == 0 else None
    return columns, rows, msg


def tableau_categories(bilan: BilanMensuel) -> Tableau:
    columns = ["Catégorie", "Nombre de consultations"]
    rows = [[designation, nombre] for designation, nombre in bilan.consultations_par_categorie.items()]
    msg = None if rows else AUCUNE_DONNEE
    return columns, rows, msg


def tableau_evolution(bilan: BilanMensuel) -> Tableau:
    columns = ["Semaine", "Nombre de consultations"]
    rows = [[f"Semaine {i}", nombre] for i, nombre in enumerate(bilan.evolution_par_semaine, start=1)]
    hors_plage = bilan.nombre_consultations - sum(bilan.evolution_par_semaine)
    if bilan.nombre_consultations == 0:
        msg = AUCUNE_CONSULTATION
    elif hors_plage > 0:
        msg = HORS_SEMAINES.format(hors_plage, len(bilan.evolution_par_semaine))
    else:
        msg = None
    return columns, rows, msg


def resume_bilan(bilan: BilanMensuel, devise: str = DEFAULTS.devise) -> str:
    return (
        f"{bilan.nom_mois} {bilan.annee} : {bilan.nombre_consultations} consultations, "
        f"{format_montant(bilan.chiffre_affaires, devise)} ({format_taux(bilan.taux_paiement)} payées)"
    )
