# cabinet/domain/errors.py
"""
Exceptions du domaine.

Hiérarchie:
- CabinetError        -> base, interceptée par la CLI
- ValidationError     -> entrée invalide (période, prix, date...)
- NotFoundError       -> entité absente
- BusinessError       -> règle métier violée
- DatabaseError       -> échec d'accès aux données (sqlite3)
"""

from __future__ import annotations

from typing import Any, Optional


class CabinetError(Exception):
    """Erreur de base de l'application."""


class ValidationError(CabinetError):
    def __init__(self, champ: Optional[str], message: str):
        super().__init__(message)
        self.champ = champ


class NotFoundError(CabinetError):
    def __init__(self, entite: str, entite_id: Any):
        super().__init__(f"{entite} avec l'id {entite_id} non trouvé(e)")
        self.entite = entite
        self.entite_id = entite_id


class BusinessError(CabinetError):
    pass


class DatabaseError(CabinetError):
    pass
