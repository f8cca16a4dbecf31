"""
Utilitaires de parsing des saisies texte (CLI).

Ce module interprète les valeurs tapées par l'utilisateur: montants
(« 150 », « 150,00 DH », « 1 250.5 »), dates au format français
(dd/MM/yyyy) ou ISO, heures (HH:mm) et périodes de bilan (« 03/2024 »,
« 2024-03 »). Toute saisie non interprétable lève une ``ValidationError``.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Tuple

from cabinet.domain.calendrier import valider_periode
from cabinet.domain.errors import ValidationError

DATE_FORMAT = "%d/%m/%Y"
TIME_FORMAT = "%H:%M"
DATETIME_FORMAT = "%d/%m/%Y %H:%M"

_NUM_RE = re.compile(r"[-+]?\d+(?:[.,]\d+)?")
_PERIODE_RE = re.compile(r"^\s*(?:(\d{1,2})[/-](\d{4})|(\d{4})[/-](\d{1,2}))\s*$")


def parse_prix(txt: Optional[str]) -> Decimal:
    """Interprète un montant; la virgule est acceptée comme séparateur décimal.

    Exemples:
        "150"        → Decimal("150")
        "150,50 DH"  → Decimal("150.50")
        "1 250.5"    → Decimal("1250.5")
    """
    if txt is None or not str(txt).strip():
        raise ValidationError("prix", "Le prix est obligatoire.")
    s = str(txt).replace(" ", "").replace("\u00a0", "")
    m = _NUM_RE.search(s)
    if not m:
        raise ValidationError("prix", f"Prix invalide: {txt}")
    try:
        return Decimal(m.group(0).replace(",", "."))
    except InvalidOperation as e:
        raise ValidationError("prix", f"Prix invalide: {txt}") from e


def parse_date(txt: Optional[str]) -> date:
    """Date au format dd/MM/yyyy ou YYYY-MM-DD."""
    if txt is None or not str(txt).strip():
        raise ValidationError("date", "La date est obligatoire.")
    s = str(txt).strip()
    for fmt in (DATE_FORMAT, "%Y-%m-%d"):
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    raise ValidationError("date", "Format de date invalide. Utilisez dd/MM/yyyy")


def parse_date_heure(date_txt: Optional[str], heure_txt: Optional[str]) -> datetime:
    jour = parse_date(date_txt)
    if heure_txt is None or not str(heure_txt).strip():
        raise ValidationError("heure", "L'heure est obligatoire.")
    try:
        heure = datetime.strptime(str(heure_txt).strip(), TIME_FORMAT).time()
    except ValueError as e:
        raise ValidationError("heure", "Format d'heure invalide. Utilisez HH:mm") from e
    return datetime.combine(jour, heure)


def parse_periode(txt: Optional[str]) -> Tuple[int, int]:
    """« MM/AAAA », « MM-AAAA » ou « AAAA-MM » → (mois, annee) validés."""
    m = _PERIODE_RE.match(str(txt or ""))
    if not m:
        raise ValidationError("periode", f"Période invalide: {txt!r} (attendu MM/AAAA)")
    if m.group(1):
        mois, annee = int(m.group(1)), int(m.group(2))
    else:
        annee, mois = int(m.group(3)), int(m.group(4))
    return valider_periode(mois, annee)


def format_date_heure(dt: Optional[datetime]) -> str:
    return dt.strftime(DATETIME_FORMAT) if dt else ""
