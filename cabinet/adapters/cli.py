# cabinet/adapters/cli.py
"""
CLI du cabinet médical (Typer).

Commandes principales:
- migrate                               -> applique les migrations
- params set/get/show                   -> paramètres globaux (devise, créneau)
- categorie add/list/rm                 -> catégories de consultation
- patient add/list, medecin add         -> référentiels
- consultation add/pay/cancel/...       -> cycle de vie des consultations
- bilan show/resume/export              -> bilan mensuel (texte, tableaux, xlsx/csv)
- logs                                  -> dernières lignes d'un fichier de log
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import List, Optional, Sequence

import typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box
from rich.markup import escape

from cabinet.config import DB_PATH, DEFAULTS
from cabinet.domain.errors import CabinetError
from cabinet.domain.models import Categorie, Consultation, Patient, TypeUtilisateur, Utilisateur
from cabinet.infra.migrations import apply_migrations
from cabinet.infra.repositories import (
    CategorieRepo,
    ConsultationRepo,
    ParamsRepo,
    PatientRepo,
    UtilisateurRepo,
)
from cabinet.infra.logger import get_log_summary
from cabinet.adapters.exporter import exporter_bilan, exporter_tableau
from cabinet.adapters.parsers import (
    format_date_heure,
    parse_date,
    parse_date_heure,
    parse_periode,
    parse_prix,
)
from cabinet.usecases.bilan import BilanService
from cabinet.usecases.categories import CategorieService
from cabinet.usecases.consultations import ConsultationService
from cabinet.usecases.patients import PatientService
from cabinet.usecases.rapport_bilan import (
    Tableau,
    format_montant,
    lignes_bilan,
    resume_bilan,
    tableau_categories,
    tableau_evolution,
    tableau_synthese,
)


app = typer.Typer(help="Cabinet médical: CLI")
console = Console()

DB_OPTION_HELP = "Chemin du SQLite"


# -----------------------
# util
# -----------------------

@contextmanager
def _erreurs():
    """Affiche les erreurs métier en rouge et termine avec le code 1."""
    try:
        yield
    except CabinetError as e:
        console.print(f"[bold red]Erreur:[/] {escape(str(e))}")
        raise typer.Exit(code=1)


def _display_table(tableau: Tableau, title: str = "Résultat") -> None:
    """Affiche un tableau ``(colonnes, lignes, message)`` avec Rich."""
    columns, rows, msg = tableau
    if not rows:
        console.print(Panel(msg or "Aucune donnée", title=title, border_style="yellow"))
        return

    table = Table(title=title, box=box.ROUNDED)
    for column in columns:
        if column.lower() in ("prix", "valeur", "nombre de consultations", "id"):
            table.add_column(column, justify="right")
        elif column.lower() in ("date", "payée"):
            table.add_column(column, justify="center")
        else:
            table.add_column(column)
    for row in rows:
        table.add_row(*[escape(str(v)) for v in row])
    console.print(table)
    if msg:
        console.print(f"[dim]{msg}[/dim]")


def _devise(db_path: str) -> str:
    return ParamsRepo(db_path).get("devise", DEFAULTS.devise)


def _tableau_consultations(consultations: Sequence[Consultation], devise: str) -> Tableau:
    columns = ["ID", "Date", "Patient", "Téléphone", "Catégorie", "Médecin", "Prix", "Payée"]
    rows = [
        [
            c.id,
            format_date_heure(c.date),
            c.patient_nom or c.patient_id,
            c.patient_telephone or "",
            c.categorie_designation or c.categorie_id,
            c.medecin_login or c.medecin_id,
            format_montant(c.prix, devise),
            "oui" if c.est_payee else "non",
        ]
        for c in consultations
    ]
    return columns, rows, None if rows else "Aucune consultation."


# -----------------------
# commandes d'infra
# -----------------------

@app.command("migrate")
def cmd_migrate(db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP)):
    """Applique les migrations (création des tables et index)."""
    with _erreurs():
        apply_migrations(db_path)
    typer.echo(f">> Migrations appliquées dans: {db_path}")


params_app = typer.Typer(help="Gérer les paramètres globaux (devise, créneau).")
app.add_typer(params_app, name="params")


@params_app.command("set")
def cmd_params_set(
    devise: Optional[str] = typer.Option(None, help="Ex.: DH"),
    creneau_minutes: Optional[int] = typer.Option(None, help="Écart minimal entre deux consultations d'un patient"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Définit les paramètres globaux (seuls ceux fournis sont modifiés)."""
    items: List[tuple[str, str]] = []
    if devise is not None:
        items.append(("devise", devise))
    if creneau_minutes is not None:
        items.append(("creneau_minutes", str(creneau_minutes)))
    if not items:
        typer.echo("Rien à modifier. Indiquez au moins un paramètre.")
        raise typer.Exit(code=1)
    with _erreurs():
        ParamsRepo(db_path).set_many(items)
    typer.echo(">> Paramètres mis à jour.")


@params_app.command("get")
def cmd_params_get(
    cle: str = typer.Argument(..., help="Ex.: devise | creneau_minutes"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Affiche un paramètre."""
    with _erreurs():
        val = ParamsRepo(db_path).get(cle)
    typer.echo("(None)" if val is None else val)


@params_app.command("show")
def cmd_params_show(db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP)):
    """Affiche les paramètres effectifs (avec repli sur les valeurs par défaut)."""
    with _erreurs():
        repo = ParamsRepo(db_path)
        rows = [
            ["devise", repo.get("devise", DEFAULTS.devise), DEFAULTS.devise],
            [
                "creneau_minutes",
                repo.get_int("creneau_minutes", DEFAULTS.creneau_minutes),
                DEFAULTS.creneau_minutes,
            ],
        ]
    _display_table((["Paramètre", "Valeur actuelle", "Valeur par défaut"], rows, None),
                   title="Paramètres du cabinet")
    console.print(f"[dim]Base de données: {db_path}[/dim]")


# -----------------------
# référentiels
# -----------------------

categorie_app = typer.Typer(help="Catégories de consultation.")
app.add_typer(categorie_app, name="categorie")


@categorie_app.command("add")
def cmd_categorie_add(
    designation: str = typer.Argument(..., help="Ex.: Consultation générale"),
    description: Optional[str] = typer.Option(None, help="Description libre"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Crée une catégorie."""
    with _erreurs():
        cat = CategorieService(CategorieRepo(db_path)).creer_categorie(
            Categorie(designation=designation, description=description)
        )
    typer.echo(f">> Catégorie créée (id={cat.id}).")


@categorie_app.command("list")
def cmd_categorie_list(db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP)):
    """Liste les catégories."""
    with _erreurs():
        cats = CategorieService(CategorieRepo(db_path)).lister()
    rows = [[c.id, c.designation, c.description or ""] for c in cats]
    _display_table((["ID", "Désignation", "Description"], rows, None if rows else "Aucune catégorie."), title="Catégories")


@categorie_app.command("rm")
def cmd_categorie_rm(
    categorie_id: int = typer.Argument(..., help="ID de la catégorie"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Supprime une catégorie non utilisée."""
    with _erreurs():
        CategorieService(CategorieRepo(db_path)).supprimer_categorie(categorie_id)
    typer.echo(">> Catégorie supprimée.")


patient_app = typer.Typer(help="Patients.")
app.add_typer(patient_app, name="patient")


@patient_app.command("add")
def cmd_patient_add(
    nom: str = typer.Argument(...),
    telephone: str = typer.Argument(...),
    email: Optional[str] = typer.Option(None),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Enregistre un patient."""
    with _erreurs():
        p = PatientService(PatientRepo(db_path)).creer_patient(Patient(nom=nom, telephone=telephone, email=email))
    typer.echo(f">> Patient créé (id={p.id}).")


@patient_app.command("list")
def cmd_patient_list(
    recherche: Optional[str] = typer.Option(None, "--recherche", "-r", help="Fragment de nom, téléphone ou email"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Liste (ou recherche) les patients."""
    with _erreurs():
        patients = PatientService(PatientRepo(db_path)).rechercher(recherche)
    rows = [[p.id, p.nom, p.telephone, p.email or ""] for p in patients]
    _display_table((["ID", "Nom", "Téléphone", "Email"], rows, None if rows else "Aucun patient."), title="Patients")


@patient_app.command("update")
def cmd_patient_update(
    patient_id: int = typer.Argument(..., help="ID du patient"),
    nom: Optional[str] = typer.Option(None, help="Nouveau nom"),
    telephone: Optional[str] = typer.Option(None, help="Nouveau téléphone"),
    email: Optional[str] = typer.Option(None, help="Nouvel email (chaîne vide pour l'effacer)"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Modifie les coordonnées d'un patient."""
    with _erreurs():
        service = PatientService(PatientRepo(db_path))
        p = service.get_patient(patient_id)
        if nom is not None:
            p.nom = nom
        if telephone is not None:
            p.telephone = telephone
        if email is not None:
            p.email = email or None
        service.modifier_patient(p)
    typer.echo(f">> Patient {patient_id} modifié.")


@patient_app.command("rm")
def cmd_patient_rm(
    patient_id: int = typer.Argument(..., help="ID du patient"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Supprime un patient et ses consultations."""
    with _erreurs():
        PatientService(PatientRepo(db_path)).supprimer_patient(patient_id)
    typer.echo(f">> Patient {patient_id} supprimé.")


medecin_app = typer.Typer(help="Utilisateurs médecins.")
app.add_typer(medecin_app, name="medecin")


@medecin_app.command("add")
def cmd_medecin_add(
    login: str = typer.Argument(...),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Enregistre un médecin."""
    with _erreurs():
        u = UtilisateurRepo(db_path).insert(Utilisateur(login=login, type=TypeUtilisateur.MEDECIN))
    typer.echo(f">> Médecin créé (id={u.id}).")


# -----------------------
# consultations
# -----------------------

consultation_app = typer.Typer(help="Consultations.")
app.add_typer(consultation_app, name="consultation")


@consultation_app.command("add")
def cmd_consultation_add(
    patient_id: int = typer.Option(..., "--patient"),
    categorie_id: int = typer.Option(..., "--categorie"),
    medecin_id: int = typer.Option(..., "--medecin"),
    jour: str = typer.Option(..., "--date", help="dd/MM/yyyy"),
    heure: str = typer.Option(..., "--heure", help="HH:mm"),
    prix: str = typer.Option(..., "--prix", help="Ex.: 150 ou 150,50"),
    description: Optional[str] = typer.Option(None),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Planifie une consultation (non payée)."""
    with _erreurs():
        c = ConsultationService.from_db(db_path).creer_consultation(Consultation(
            date=parse_date_heure(jour, heure),
            prix=parse_prix(prix),
            patient_id=patient_id,
            categorie_id=categorie_id,
            medecin_id=medecin_id,
            description=description,
        ))
    typer.echo(f">> Consultation créée (id={c.id}).")


@consultation_app.command("pay")
def cmd_consultation_pay(
    consultation_id: int = typer.Argument(...),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Valide le paiement d'une consultation."""
    with _erreurs():
        ConsultationService.from_db(db_path).valider_paiement(consultation_id)
    typer.echo(">> Paiement validé.")


@consultation_app.command("cancel")
def cmd_consultation_cancel(
    consultation_id: int = typer.Argument(...),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Annule (supprime) une consultation à venir."""
    with _erreurs():
        ConsultationService.from_db(db_path).annuler_consultation(consultation_id)
    typer.echo(">> Consultation annulée.")


@consultation_app.command("impayees")
def cmd_consultation_impayees(
    export: Optional[str] = typer.Option(None, "--export", help="Fichier .xlsx ou .csv"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Liste les consultations non payées (optionnellement exportées)."""
    with _erreurs():
        tableau = _tableau_consultations(
            ConsultationService.from_db(db_path).consultations_non_payees(), _devise(db_path)
        )
        if export:
            exporter_tableau(tableau, export)
            typer.echo(f">> Export écrit: {export}")
    _display_table(tableau, title="Consultations impayées")


@consultation_app.command("relance")
def cmd_consultation_relance(
    jour: Optional[str] = typer.Option(None, "--date", help="dd/MM/yyyy (défaut: aujourd'hui)"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Patients à relancer: consultations des deux jours suivants."""
    with _erreurs():
        ref = parse_date(jour) if jour else None
        tableau = _tableau_consultations(
            ConsultationService.from_db(db_path).patients_a_relancer(ref), _devise(db_path)
        )
    _display_table(tableau, title="Patients à relancer")


@consultation_app.command("jour")
def cmd_consultation_jour(
    jour: Optional[str] = typer.Option(None, "--date", help="dd/MM/yyyy (défaut: aujourd'hui)"),
    medecin_id: Optional[int] = typer.Option(None, "--medecin"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Consultations d'une journée (tous médecins ou un seul)."""
    with _erreurs():
        ref = parse_date(jour) if jour else date.today()
        service = ConsultationService.from_db(db_path)
        if medecin_id is None:
            consultations = service.consultations_du_jour(ref)
        else:
            consultations = service.consultations_journalieres(medecin_id, ref)
        tableau = _tableau_consultations(consultations, _devise(db_path))
    _display_table(tableau, title=f"Consultations du {ref.strftime('%d/%m/%Y')}")


# -----------------------
# bilan
# -----------------------

bilan_app = typer.Typer(help="Bilan mensuel.")
app.add_typer(bilan_app, name="bilan")


@bilan_app.command("show")
def cmd_bilan_show(
    mois: int = typer.Argument(..., help="1-12"),
    annee: int = typer.Argument(...),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Affiche le rapport du bilan mensuel et ses tableaux."""
    with _erreurs():
        bilan = BilanService(ConsultationRepo(db_path)).get_bilan_mensuel(mois, annee)
        devise = _devise(db_path)
    for ligne in lignes_bilan(bilan, devise):
        console.print(ligne, highlight=False, markup=False)
    _display_table(tableau_synthese(bilan, devise), title="Synthèse")
    _display_table(tableau_categories(bilan), title="Consultations par catégorie")
    _display_table(tableau_evolution(bilan), title="Évolution par semaine")


@bilan_app.command("resume")
def cmd_bilan_resume(
    periode: str = typer.Argument(..., help="MM/AAAA"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Résumé du bilan sur une ligne."""
    with _erreurs():
        mois, annee = parse_periode(periode)
        bilan = BilanService(ConsultationRepo(db_path)).get_bilan_mensuel(mois, annee)
        typer.echo(resume_bilan(bilan, _devise(db_path)))


@bilan_app.command("export")
def cmd_bilan_export(
    mois: int = typer.Argument(..., help="1-12"),
    annee: int = typer.Argument(...),
    fichier: str = typer.Argument(..., help="Fichier .xlsx ou .csv"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Exporte le bilan mensuel vers un fichier tableur."""
    with _erreurs():
        bilan = BilanService(ConsultationRepo(db_path)).get_bilan_mensuel(mois, annee)
        exporter_bilan(bilan, fichier, _devise(db_path))
    typer.echo(f">> Bilan exporté: {fichier}")


# -----------------------
# logs
# -----------------------

@app.command("logs")
def cmd_logs(
    type_log: str = typer.Option("transactions", "--type", help="transactions | consultations | bilan | database | system"),
    lignes: int = typer.Option(50, min=1, help="Nombre de lignes"),
):
    """Affiche la fin d'un fichier de log."""
    typer.echo(get_log_summary(type_log, lignes))


# Point d'entrée optionnel:
def main():
    app()


if __name__ == "__main__":
    main()
