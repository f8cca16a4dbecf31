# cabinet/infra/migrations.py
"""
Migrations de schéma via PRAGMA user_version.

V1: tables de base (params, utilisateur, patient, categorie, consultation)
V2: index sur les colonnes interrogées par les bilans et les listes
"""

from __future__ import annotations

from typing import List
from .db import connect


SCHEMA_V1: List[str] = [
    # Paramètres clé/valeur
    """
    CREATE TABLE IF NOT EXISTS params (
        cle TEXT PRIMARY KEY,
        valeur TEXT
    );
    """,
    # Utilisateurs (tag MEDECIN / ASSISTANT)
    """
    CREATE TABLE IF NOT EXISTS utilisateur (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        login TEXT NOT NULL UNIQUE,
        type TEXT NOT NULL CHECK (type IN ('MEDECIN', 'ASSISTANT')),
        created_at TEXT DEFAULT CURRENT_TIMESTAMP
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS patient (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        nom TEXT NOT NULL,
        telephone TEXT NOT NULL UNIQUE,
        email TEXT,
        created_at TEXT DEFAULT CURRENT_TIMESTAMP
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS categorie (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        designation TEXT NOT NULL UNIQUE,
        description TEXT
    );
    """,
    # Consultations: prix en centimes, date ISO 'YYYY-MM-DD HH:MM:SS'
    """
    CREATE TABLE IF NOT EXISTS consultation (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        date TEXT NOT NULL,
        description TEXT,
        prix_centimes INTEGER NOT NULL CHECK (prix_centimes > 0),
        patient_id INTEGER NOT NULL,
        categorie_id INTEGER NOT NULL,
        medecin_id INTEGER NOT NULL,
        est_payee INTEGER NOT NULL DEFAULT 0,
        created_at TEXT DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (patient_id) REFERENCES patient(id) ON DELETE CASCADE,
        FOREIGN KEY (categorie_id) REFERENCES categorie(id),
        FOREIGN KEY (medecin_id) REFERENCES utilisateur(id)
    );
    """,
]


def _apply_v1(conn) -> None:
    for sql in SCHEMA_V1:
        conn.executescript(sql)


def _apply_v2(conn) -> None:
    conn.executescript(
        """
        CREATE INDEX IF NOT EXISTS idx_consultation_date      ON consultation(date);
        CREATE INDEX IF NOT EXISTS idx_consultation_patient   ON consultation(patient_id, date);
        CREATE INDEX IF NOT EXISTS idx_consultation_medecin   ON consultation(medecin_id, date);
        CREATE INDEX IF NOT EXISTS idx_consultation_categorie ON consultation(categorie_id);
        """
    )


def apply_migrations(db_path: str) -> None:
    """Applique les migrations incrémentales selon PRAGMA user_version."""
    with connect(db_path, create=True) as conn:
        ver = conn.execute("PRAGMA user_version;").fetchone()[0] or 0

        if ver < 1:
            _apply_v1(conn)
            conn.execute("PRAGMA user_version = 1;")
            ver = 1

        if ver < 2:
            _apply_v2(conn)
            conn.execute("PRAGMA user_version = 2;")
            ver = 2
