from decimal import Decimal

from cabinet.domain.models import BilanMensuel
from cabinet.usecases.rapport_bilan import (
    AUCUNE_CONSULTATION,
    AUCUNE_DONNEE,
    HORS_SEMAINES,
    format_montant,
    format_taux,
    lignes_bilan,
    resume_bilan,
    tableau_categories,
    tableau_evolution,
    tableau_synthese,
)


def _bilan_mars():
    return BilanMensuel(
        mois=3,
        annee=2024,
        nombre_consultations=3,
        chiffre_affaires=Decimal("250.00"),
        consultations_par_categorie={"Routine": 2, "Urgence": 1},
        evolution_par_semaine=[0, 1, 1, 0, 1],
        consultations_payees=2,
        consultations_impayees=1,
        montant_impayes=Decimal("80.00"),
    )


def test_formats():
    assert format_montant(Decimal("250")) == "250.00 DH"
    assert format_montant(Decimal("12.5"), "EUR") == "12.50 EUR"
    assert format_taux(200 / 3) == "66.7%"
    assert format_taux(0.0) == "0.0%"


def test_lignes_bilan_mars():
    texte = "\n".join(lignes_bilan(_bilan_mars()))
    assert "BILAN MENSUEL - Mars 2024" in texte
    assert "Nombre total de consultations : 3" in texte
    assert "Chiffre d'affaires            : 250.00 DH" in texte
    assert "Prix moyen par consultation   : 83.33 DH" in texte
    assert "Montant des impayés           : 80.00 DH" in texte
    assert "Taux de paiement              : 66.7%" in texte
    assert "• Routine: 2" in texte
    assert "Semaine 5 : 1" in texte
    assert AUCUNE_DONNEE not in texte


def test_lignes_bilan_vide_explicite():
    lignes = lignes_bilan(BilanMensuel(mois=2, annee=2023))
    texte = "\n".join(lignes)
    assert "BILAN MENSUEL - Février 2023" in texte
    assert AUCUNE_CONSULTATION in texte
    assert AUCUNE_DONNEE in texte
    assert "Taux de paiement              : 0.0%" in texte
    # les cinq semaines sont toujours listées
    assert sum(1 for l in lignes if l.strip().startswith("Semaine ")) == 5


def test_tableau_synthese():
    columns, rows, msg = tableau_synthese(_bilan_mars(), devise="DH")
    assert columns == ["Indicateur", "Valeur"]
    assert dict(rows)["Chiffre d'affaires"] == "250.00 DH"
    assert dict(rows)["Taux de paiement"] == "66.7%"
    assert msg is None

    _, _, msg_vide = tableau_synthese(BilanMensuel(mois=1, annee=2024))
    assert msg_vide == AUCUNE_CONSULTATION


def test_tableau_categories():
    columns, rows, msg = tableau_categories(_bilan_mars())
    assert rows == [["Routine", 2], ["Urgence", 1]]
    assert msg is None

    _, rows, msg = tableau_categories(BilanMensuel(mois=1, annee=2024))
    assert rows == []
    assert msg == AUCUNE_DONNEE


def test_tableau_evolution_toujours_cinq_lignes():
    _, rows, msg = tableau_evolution(_bilan_mars())
    assert [r[0] for r in rows] == [f"Semaine {i}" for i in range(1, 6)]
    assert [r[1] for r in rows] == [0, 1, 1, 0, 1]
    assert msg is None

    _, rows, msg = tableau_evolution(BilanMensuel(mois=1, annee=2024))
    assert len(rows) == 5
    assert msg == AUCUNE_CONSULTATION


def test_tableau_evolution_consultations_hors_semaines():
    # seule consultation du mois dans une sixième semaine (ex.: 30/06/2025)
    bilan = BilanMensuel(mois=6, annee=2025, nombre_consultations=1, evolution_par_semaine=[0] * 5)

    _, rows, msg = tableau_evolution(bilan)
    assert len(rows) == 5
    assert msg != AUCUNE_CONSULTATION
    assert msg == HORS_SEMAINES.format(1, 5)
    assert tableau_synthese(bilan)[2] is None

    texte = "\n".join(lignes_bilan(bilan))
    assert AUCUNE_CONSULTATION not in texte
    assert "1 consultation(s) hors des 5 semaines" in texte


def test_resume_bilan():
    assert resume_bilan(_bilan_mars()) == "Mars 2024 : 3 consultations, 250.00 DH (66.7% payées)"
