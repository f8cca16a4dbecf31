# cabinet/infra/db.py
"""
Utilitaires de connexion SQLite.
"""

from __future__ import annotations

from pathlib import Path
import sqlite3
from contextlib import contextmanager
from typing import Iterator

from cabinet.domain.errors import DatabaseError


@contextmanager
def connect(db_path: str, create: bool = False) -> Iterator[sqlite3.Connection]:
    """
    Context manager pour ouvrir une connexion SQLite avec:
    - foreign_keys ON
    - row_factory = sqlite3.Row
    - commit à la sortie (rollback en cas d'exception)

    Sans ``create=True`` la base doit déjà exister: une base absente est une
    erreur d'accès aux données, pas une base vide.
    Toute ``sqlite3.Error`` est convertie en ``DatabaseError``.
    """
    try:
        if create:
            conn = sqlite3.connect(db_path)
        else:
            uri = Path(db_path).resolve().as_uri() + "?mode=rw"
            conn = sqlite3.connect(uri, uri=True)
    except sqlite3.Error as e:
        raise DatabaseError(f"Base de données inaccessible ({db_path}): {e}") from e
    try:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        yield conn
        conn.commit()
    except sqlite3.Error as e:
        conn.rollback()
        raise DatabaseError(f"Erreur base de données: {e}") from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
