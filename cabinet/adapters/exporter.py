# cabinet/adapters/exporter.py
"""
Export des bilans et des listes vers des fichiers tableur (pandas).

- ``.xlsx``: un onglet par tableau (Synthese, Categories, Evolution);
- ``.csv``: un seul tableau long (section, libelle, valeur).

Les tableaux sont ceux produits par ``cabinet.usecases.rapport_bilan``;
un tableau vide est exporté avec son message à la place des lignes.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Dict, List

import pandas as pd

from cabinet.config import DEFAULTS
from cabinet.domain.errors import ValidationError
from cabinet.domain.models import BilanMensuel
from cabinet.usecases.rapport_bilan import (
    Tableau,
    tableau_categories,
    tableau_evolution,
    tableau_synthese,
)
from cabinet.infra.logger import log_file_operation


FORMATS = {".xlsx", ".csv"}


def _frame(tableau: Tableau) -> pd.DataFrame:
    columns, rows, msg = tableau
    if not rows and msg:
        rows = [[msg] + [""] * (len(columns) - 1)]
    return pd.DataFrame(rows, columns=columns)


def _suffixe(path: str) -> str:
    suffixe = Path(path).suffix.lower()
    if suffixe not in FORMATS:
        raise ValidationError("fichier", f"Format non supporté: {suffixe or path} (attendu .xlsx ou .csv)")
    return suffixe


@contextmanager
def _ecriture(path: str):
    """Convertit les erreurs d'écriture (dossier absent, droits) en ValidationError."""
    try:
        yield
    except OSError as e:
        raise ValidationError("fichier", f"Écriture impossible: {path} ({e})") from e


def bilan_frames(bilan: BilanMensuel, devise: str = DEFAULTS.devise) -> Dict[str, pd.DataFrame]:
    """Tableaux du bilan sous forme de DataFrames, par nom d'onglet."""
    return {
        "Synthese": _frame(tableau_synthese(bilan, devise)),
        "Categories": _frame(tableau_categories(bilan)),
        "Evolution": _frame(tableau_evolution(bilan)),
    }


def exporter_bilan(bilan: BilanMensuel, path: str, devise: str = DEFAULTS.devise) -> str:
    suffixe = _suffixe(path)
    frames = bilan_frames(bilan, devise)

    with _ecriture(path):
        if suffixe == ".xlsx":
            with pd.ExcelWriter(path) as writer:
                for nom, df in frames.items():
                    df.to_excel(writer, sheet_name=nom, index=False)
        else:
            longs: List[pd.DataFrame] = []
            for nom, df in frames.items():
                longs.append(pd.DataFrame({
                    "section": nom,
                    "libelle": df.iloc[:, 0].astype(str),
                    "valeur": df.iloc[:, 1].astype(str),
                }))
            pd.concat(longs, ignore_index=True).to_csv(path, index=False)

    log_file_operation("export", path, rows_processed=sum(len(df) for df in frames.values()),
                       mois=bilan.mois, annee=bilan.annee)
    return path


def exporter_tableau(tableau: Tableau, path: str) -> str:
    """Exporte un tableau ``(colonnes, lignes, message)`` quelconque."""
    suffixe = _suffixe(path)
    df = _frame(tableau)
    with _ecriture(path):
        if suffixe == ".xlsx":
            df.to_excel(path, index=False)
        else:
            df.to_csv(path, index=False)
    log_file_operation("export", path, rows_processed=len(df))
    return path
