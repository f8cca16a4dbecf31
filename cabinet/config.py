# cabinet/config.py
"""
Configuration globale et valeurs par défaut du cabinet.
"""

import os
from dataclasses import dataclass


# Chemin par défaut de la base SQLite (surchargeable par CABINET_DB)
DB_PATH = os.environ.get("CABINET_DB", os.path.join(os.getcwd(), "cabinet.db"))


@dataclass
class DefaultConfig:
    """Valeurs par défaut des paramètres du cabinet."""
    devise: str = "DH"
    creneau_minutes: int = 30  # écart minimal entre deux consultations d'un même patient
    nb_semaines: int = 5       # nombre de cases de l'évolution hebdomadaire


# Instance globale des valeurs par défaut
DEFAULTS = DefaultConfig()
