# cabinet/usecases/categories.py
"""
Cas d'usage: catégories de consultation.

- la désignation est unique;
- une catégorie référencée par des consultations ne peut pas être supprimée.
"""

from __future__ import annotations

from typing import List

from cabinet.domain.errors import BusinessError, NotFoundError, ValidationError
from cabinet.domain.models import Categorie
from cabinet.infra.repositories import CategorieRepo
from cabinet.infra.logger import log_database_operation, log_transaction


class CategorieService:
    def __init__(self, categorie_repo: CategorieRepo):
        self.categorie_repo = categorie_repo

    def creer_categorie(self, categorie: Categorie) -> Categorie:
        if not (categorie.designation or "").strip():
            raise ValidationError("designation", "La désignation est obligatoire.")
        if self.categorie_repo.find_by_designation(categorie.designation) is not None:
            raise BusinessError("Une catégorie avec cette désignation existe déjà.")
        self.categorie_repo.insert(categorie)
        log_database_operation("categorie", "INSERT", 1, designation=categorie.designation)
        return categorie

    def get_categorie(self, categorie_id: int) -> Categorie:
        categorie = self.categorie_repo.get(categorie_id)
        if categorie is None:
            raise NotFoundError("Catégorie", categorie_id)
        return categorie

    def lister(self) -> List[Categorie]:
        return self.categorie_repo.find_all()

    def compter(self) -> int:
        return self.categorie_repo.count()

    def modifier_categorie(self, categorie: Categorie) -> Categorie:
        self.get_categorie(categorie.id)
        autre = self.categorie_repo.find_by_designation(categorie.designation)
        if autre is not None and autre.id != categorie.id:
            raise BusinessError("Une autre catégorie a déjà cette désignation.")
        self.categorie_repo.update(categorie)
        log_database_operation("categorie", "UPDATE", 1, categorie_id=categorie.id)
        return categorie

    def supprimer_categorie(self, categorie_id: int) -> bool:
        self.get_categorie(categorie_id)
        if self.categorie_repo.is_used_by_consultations(categorie_id):
            log_transaction("supprimer_categorie", {"id": categorie_id}, error="categorie utilisee")
            raise BusinessError(
                "Cette catégorie est utilisée par des consultations et ne peut pas être supprimée."
            )
        ok = self.categorie_repo.delete(categorie_id)
        log_database_operation("categorie", "DELETE", int(ok), categorie_id=categorie_id)
        return ok
