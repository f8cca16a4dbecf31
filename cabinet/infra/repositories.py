# cabinet/infra/repositories.py
"""
Repositories (DAO) d'accès aux données SQLite.

Classes:
- ParamsRepo
- UtilisateurRepo
- PatientRepo
- CategorieRepo
- ConsultationRepo   (source des bilans mensuels)

Chaque repository reçoit le chemin de la base à la construction et ouvre
une connexion courte par opération (voir ``connect``).
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .db import connect
from .logger import bilan_logger
from cabinet.config import DEFAULTS
from cabinet.domain.calendrier import bornes_mois, semaine_du_mois
from cabinet.domain.models import (
    CENTIMES,
    Categorie,
    Consultation,
    Patient,
    TypeUtilisateur,
    Utilisateur,
)


# -------------------------
# Helpers
# -------------------------

def _iso(dt: datetime) -> str:
    """Format de stockage des dates: 'YYYY-MM-DD HH:MM:SS'."""
    return dt.isoformat(sep=" ")


def _parse_dt(val: Optional[str]) -> Optional[datetime]:
    if val is None:
        return None
    return datetime.fromisoformat(str(val))


def _to_centimes(montant: Any) -> int:
    return int((Decimal(str(montant)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _from_centimes(centimes: Optional[int]) -> Decimal:
    return (Decimal(int(centimes or 0)) / 100).quantize(CENTIMES)


def _debut_jour(jour: date) -> datetime:
    return datetime(jour.year, jour.month, jour.day)


def _periode(mois: int, annee: int) -> Tuple[str, str]:
    debut, fin = bornes_mois(mois, annee)
    return _iso(debut), _iso(fin)


# -------------------------
# Params
# -------------------------

class ParamsRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def set_many(self, items: Iterable[Tuple[str, str]]) -> None:
        with connect(self.db_path) as c:
            c.executemany(
                """
                INSERT INTO params (cle, valeur)
                VALUES (?, ?)
                ON CONFLICT(cle) DO UPDATE SET valeur=excluded.valeur
                """,
                list(items),
            )

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with connect(self.db_path) as c:
            row = c.execute("SELECT valeur FROM params WHERE cle = ?", (key,)).fetchone()
            return row[0] if row else default

    def get_int(self, key: str, default: int) -> int:
        v = self.get(key, None)
        if v is None:
            return default
        try:
            return int(v)
        except ValueError:
            return default


# -------------------------
# Utilisateurs
# -------------------------

class UtilisateurRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    @staticmethod
    def _row(row) -> Utilisateur:
        return Utilisateur(
            id=row["id"],
            login=row["login"],
            type=TypeUtilisateur.from_str(row["type"]),
            created_at=_parse_dt(row["created_at"]),
        )

    def insert(self, utilisateur: Utilisateur) -> Utilisateur:
        with connect(self.db_path) as c:
            cur = c.execute(
                "INSERT INTO utilisateur (login, type) VALUES (?, ?)",
                (utilisateur.login, utilisateur.type.value),
            )
            utilisateur.id = cur.lastrowid
        return utilisateur

    def get(self, utilisateur_id: int) -> Optional[Utilisateur]:
        with connect(self.db_path) as c:
            row = c.execute("SELECT * FROM utilisateur WHERE id = ?", (utilisateur_id,)).fetchone()
            return self._row(row) if row else None

    def find_by_login(self, login: str) -> Optional[Utilisateur]:
        with connect(self.db_path) as c:
            row = c.execute("SELECT * FROM utilisateur WHERE login = ?", (login,)).fetchone()
            return self._row(row) if row else None

    def find_all(self, type: Optional[TypeUtilisateur] = None) -> List[Utilisateur]:
        with connect(self.db_path) as c:
            if type is None:
                cur = c.execute("SELECT * FROM utilisateur ORDER BY login")
            else:
                cur = c.execute(
                    "SELECT * FROM utilisateur WHERE type = ? ORDER BY login", (type.value,)
                )
            return [self._row(r) for r in cur.fetchall()]


# -------------------------
# Patients
# -------------------------

class PatientRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    @staticmethod
    def _row(row) -> Patient:
        return Patient(
            id=row["id"],
            nom=row["nom"],
            telephone=row["telephone"],
            email=row["email"],
            created_at=_parse_dt(row["created_at"]),
        )

    def insert(self, patient: Patient) -> Patient:
        with connect(self.db_path) as c:
            cur = c.execute(
                "INSERT INTO patient (nom, telephone, email) VALUES (?, ?, ?)",
                (patient.nom, patient.telephone, patient.email),
            )
            patient.id = cur.lastrowid
        return patient

    def get(self, patient_id: int) -> Optional[Patient]:
        with connect(self.db_path) as c:
            row = c.execute("SELECT * FROM patient WHERE id = ?", (patient_id,)).fetchone()
            return self._row(row) if row else None

    def find_all(self) -> List[Patient]:
        with connect(self.db_path) as c:
            cur = c.execute("SELECT * FROM patient ORDER BY nom")
            return [self._row(r) for r in cur.fetchall()]

    def find_by_telephone(self, telephone: str) -> Optional[Patient]:
        with connect(self.db_path) as c:
            row = c.execute("SELECT * FROM patient WHERE telephone = ?", (telephone,)).fetchone()
            return self._row(row) if row else None

    def find_by_email(self, email: str) -> Optional[Patient]:
        with connect(self.db_path) as c:
            row = c.execute("SELECT * FROM patient WHERE email = ?", (email,)).fetchone()
            return self._row(row) if row else None

    def update(self, patient: Patient) -> bool:
        with connect(self.db_path) as c:
            cur = c.execute(
                "UPDATE patient SET nom = ?, telephone = ?, email = ? WHERE id = ?",
                (patient.nom, patient.telephone, patient.email, patient.id),
            )
            return cur.rowcount > 0

    def delete(self, patient_id: int) -> bool:
        """Supprime le patient et, en cascade, ses consultations."""
        with connect(self.db_path) as c:
            cur = c.execute("DELETE FROM patient WHERE id = ?", (patient_id,))
            return cur.rowcount > 0

    def search(self, critere: str) -> List[Patient]:
        """Recherche par fragment de nom, téléphone ou email."""
        motif = f"%{critere.strip()}%"
        with connect(self.db_path) as c:
            cur = c.execute(
                """
                SELECT * FROM patient
                WHERE nom LIKE ? OR telephone LIKE ? OR email LIKE ?
                ORDER BY nom
                """,
                (motif, motif, motif),
            )
            return [self._row(r) for r in cur.fetchall()]

    def count(self) -> int:
        with connect(self.db_path) as c:
            return c.execute("SELECT COUNT(*) FROM patient").fetchone()[0]


# -------------------------
# Catégories
# -------------------------

class CategorieRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    @staticmethod
    def _row(row) -> Categorie:
        return Categorie(id=row["id"], designation=row["designation"], description=row["description"])

    def insert(self, categorie: Categorie) -> Categorie:
        with connect(self.db_path) as c:
            cur = c.execute(
                "INSERT INTO categorie (designation, description) VALUES (?, ?)",
                (categorie.designation, categorie.description),
            )
            categorie.id = cur.lastrowid
        return categorie

    def get(self, categorie_id: int) -> Optional[Categorie]:
        with connect(self.db_path) as c:
            row = c.execute("SELECT * FROM categorie WHERE id = ?", (categorie_id,)).fetchone()
            return self._row(row) if row else None

    def find_by_designation(self, designation: str) -> Optional[Categorie]:
        with connect(self.db_path) as c:
            row = c.execute(
                "SELECT * FROM categorie WHERE designation = ?", (designation,)
            ).fetchone()
            return self._row(row) if row else None

    def find_all(self) -> List[Categorie]:
        with connect(self.db_path) as c:
            cur = c.execute("SELECT * FROM categorie ORDER BY designation")
            return [self._row(r) for r in cur.fetchall()]

    def update(self, categorie: Categorie) -> bool:
        with connect(self.db_path) as c:
            cur = c.execute(
                "UPDATE categorie SET designation = ?, description = ? WHERE id = ?",
                (categorie.designation, categorie.description, categorie.id),
            )
            return cur.rowcount > 0

    def delete(self, categorie_id: int) -> bool:
        with connect(self.db_path) as c:
            cur = c.execute("DELETE FROM categorie WHERE id = ?", (categorie_id,))
            return cur.rowcount > 0

    def is_used_by_consultations(self, categorie_id: int) -> bool:
        with connect(self.db_path) as c:
            row = c.execute(
                "SELECT 1 FROM consultation WHERE categorie_id = ? LIMIT 1", (categorie_id,)
            ).fetchone()
            return row is not None

    def count(self) -> int:
        with connect(self.db_path) as c:
            return c.execute("SELECT COUNT(*) FROM categorie").fetchone()[0]


# -------------------------
# Consultations
# -------------------------

_SELECT_DETAILS = """
    SELECT c.*,
           p.nom          AS patient_nom,
           p.telephone    AS patient_telephone,
           cat.designation AS categorie_designation,
           u.login        AS medecin_login
    FROM consultation c
    JOIN patient p     ON c.patient_id = p.id
    JOIN categorie cat ON c.categorie_id = cat.id
    JOIN utilisateur u ON c.medecin_id = u.id
"""


class ConsultationRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    @staticmethod
    def _row(row) -> Consultation:
        keys = row.keys()
        return Consultation(
            id=row["id"],
            date=_parse_dt(row["date"]),
            description=row["description"],
            prix=_from_centimes(row["prix_centimes"]),
            patient_id=row["patient_id"],
            categorie_id=row["categorie_id"],
            medecin_id=row["medecin_id"],
            est_payee=bool(row["est_payee"]),
            created_at=_parse_dt(row["created_at"]),
            patient_nom=row["patient_nom"] if "patient_nom" in keys else None,
            patient_telephone=row["patient_telephone"] if "patient_telephone" in keys else None,
            categorie_designation=row["categorie_designation"] if "categorie_designation" in keys else None,
            medecin_login=row["medecin_login"] if "medecin_login" in keys else None,
        )

    def _select(self, where: str = "", params: Tuple = (), order: str = "c.date ASC") -> List[Consultation]:
        sql = _SELECT_DETAILS + (f" WHERE {where}" if where else "") + f" ORDER BY {order}"
        with connect(self.db_path) as c:
            return [self._row(r) for r in c.execute(sql, params).fetchall()]

    # --------- écriture ---------

    def insert(self, consultation: Consultation) -> Consultation:
        with connect(self.db_path) as c:
            cur = c.execute(
                """
                INSERT INTO consultation
                    (date, description, prix_centimes, patient_id, categorie_id, medecin_id, est_payee)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    _iso(consultation.date),
                    consultation.description,
                    _to_centimes(consultation.prix),
                    consultation.patient_id,
                    consultation.categorie_id,
                    consultation.medecin_id,
                    1 if consultation.est_payee else 0,
                ),
            )
            consultation.id = cur.lastrowid
        return consultation

    def update(self, consultation: Consultation) -> bool:
        """Met à jour les champs modifiables; le statut de paiement n'est pas touché."""
        with connect(self.db_path) as c:
            cur = c.execute(
                """
                UPDATE consultation
                SET date = ?, description = ?, prix_centimes = ?,
                    patient_id = ?, categorie_id = ?, medecin_id = ?
                WHERE id = ?
                """,
                (
                    _iso(consultation.date),
                    consultation.description,
                    _to_centimes(consultation.prix),
                    consultation.patient_id,
                    consultation.categorie_id,
                    consultation.medecin_id,
                    consultation.id,
                ),
            )
            return cur.rowcount > 0

    def delete(self, consultation_id: int) -> bool:
        with connect(self.db_path) as c:
            cur = c.execute("DELETE FROM consultation WHERE id = ?", (consultation_id,))
            return cur.rowcount > 0

    def valider_paiement(self, consultation_id: int) -> bool:
        """Passe ``est_payee`` à 1; sans effet sur une consultation déjà payée."""
        with connect(self.db_path) as c:
            cur = c.execute(
                "UPDATE consultation SET est_payee = 1 WHERE id = ? AND est_payee = 0",
                (consultation_id,),
            )
            return cur.rowcount > 0

    # --------- lecture ---------

    def get(self, consultation_id: int) -> Optional[Consultation]:
        res = self._select("c.id = ?", (consultation_id,))
        return res[0] if res else None

    def find_all(self) -> List[Consultation]:
        return self._select(order="c.date DESC")

    def find_by_date(self, jour: date) -> List[Consultation]:
        debut = _debut_jour(jour)
        return self._select(
            "c.date >= ? AND c.date < ?", (_iso(debut), _iso(debut + timedelta(days=1)))
        )

    def find_by_medecin_and_date(self, medecin_id: int, jour: date) -> List[Consultation]:
        debut = _debut_jour(jour)
        return self._select(
            "c.medecin_id = ? AND c.date >= ? AND c.date < ?",
            (medecin_id, _iso(debut), _iso(debut + timedelta(days=1))),
        )

    def find_by_medecin(self, medecin_id: int) -> List[Consultation]:
        return self._select("c.medecin_id = ?", (medecin_id,))

    def find_by_patient(self, patient_id: int) -> List[Consultation]:
        return self._select("c.patient_id = ?", (patient_id,), order="c.date DESC")

    def find_non_payees(self) -> List[Consultation]:
        return self._select("c.est_payee = 0", order="c.date DESC")

    def find_for_relance(self, jour: date) -> List[Consultation]:
        """Consultations du lendemain et du surlendemain de ``jour``."""
        debut = _debut_jour(jour) + timedelta(days=1)
        return self._select(
            "c.date >= ? AND c.date < ?", (_iso(debut), _iso(debut + timedelta(days=2)))
        )

    def find_between(self, debut: date, fin: date) -> List[Consultation]:
        """Consultations dont le jour est dans ``[debut, fin]`` (bornes incluses)."""
        return self._select(
            "c.date >= ? AND c.date < ?",
            (_iso(_debut_jour(debut)), _iso(_debut_jour(fin) + timedelta(days=1))),
        )

    def is_creneau_disponible(
        self,
        patient_id: int,
        quand: datetime,
        minutes: int = DEFAULTS.creneau_minutes,
        exclure_id: Optional[int] = None,
    ) -> bool:
        """Vrai si le patient n'a aucune autre consultation à ± ``minutes``."""
        debut = quand - timedelta(minutes=minutes)
        fin = quand + timedelta(minutes=minutes)
        with connect(self.db_path) as c:
            row = c.execute(
                """
                SELECT COUNT(*) FROM consultation
                WHERE patient_id = ? AND date BETWEEN ? AND ? AND id != ?
                """,
                (patient_id, _iso(debut), _iso(fin), exclure_id if exclure_id is not None else -1),
            ).fetchone()
            return row[0] == 0

    # --------- agrégats mensuels ---------

    def find_by_mois(self, mois: int, annee: int) -> List[Consultation]:
        return self._select("c.date >= ? AND c.date < ?", _periode(mois, annee))

    def chiffre_affaires(self, mois: int, annee: int) -> Decimal:
        """Somme des prix des consultations PAYÉES du mois."""
        debut, fin = _periode(mois, annee)
        with connect(self.db_path) as c:
            row = c.execute(
                """
                SELECT COALESCE(SUM(prix_centimes), 0) AS total
                FROM consultation
                WHERE date >= ? AND date < ? AND est_payee = 1
                """,
                (debut, fin),
            ).fetchone()
            return _from_centimes(row["total"])

    def stats_par_categorie(self, mois: int, annee: int) -> Dict[str, int]:
        """Nombre de consultations par désignation (décroissant, puis alphabétique)."""
        debut, fin = _periode(mois, annee)
        with connect(self.db_path) as c:
            cur = c.execute(
                """
                SELECT cat.designation AS designation, COUNT(*) AS nombre
                FROM consultation c
                JOIN categorie cat ON c.categorie_id = cat.id
                WHERE c.date >= ? AND c.date < ?
                GROUP BY cat.designation
                ORDER BY nombre DESC, cat.designation ASC
                """,
                (debut, fin),
            )
            return {r["designation"]: int(r["nombre"]) for r in cur.fetchall()}

    def evolution_par_semaine(self, mois: int, annee: int) -> List[int]:
        """Nombre de consultations par semaine du mois (toujours 5 cases).

        Une consultation tombant dans une 6e semaine (fin de mois débordant sur
        une sixième semaine commençant un lundi) n'a pas de case: elle est
        ignorée et signalée dans le log des bilans.
        """
        debut, fin = _periode(mois, annee)
        with connect(self.db_path) as c:
            rows = c.execute(
                "SELECT date FROM consultation WHERE date >= ? AND date < ?", (debut, fin)
            ).fetchall()

        nb = DEFAULTS.nb_semaines
        compte: Dict[int, int] = defaultdict(int)
        for r in rows:
            compte[semaine_du_mois(_parse_dt(r["date"]))] += 1

        hors_plage = sum(n for s, n in compte.items() if not 1 <= s <= nb)
        if hors_plage:
            bilan_logger.warning(
                f"EVOLUTION_SEMAINE: {hors_plage} consultation(s) hors des {nb} semaines "
                f"ignorée(s) pour {mois:02d}/{annee}"
            )
        return [compte.get(s, 0) for s in range(1, nb + 1)]
