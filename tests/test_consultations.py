from datetime import date, datetime
from decimal import Decimal

import pytest

from cabinet.domain.errors import BusinessError, NotFoundError, ValidationError
from cabinet.domain.models import Categorie, Consultation, Patient, TypeUtilisateur, Utilisateur
from cabinet.infra.migrations import apply_migrations
from cabinet.infra.repositories import (
    CategorieRepo,
    ConsultationRepo,
    ParamsRepo,
    PatientRepo,
    UtilisateurRepo,
)
from cabinet.usecases.consultations import ConsultationService


MAINTENANT = datetime(2024, 3, 15, 12, 0)


@pytest.fixture
def env(tmp_path):
    db_path = str(tmp_path / "cabinet_test.sqlite")
    apply_migrations(db_path)
    patient = PatientRepo(db_path).insert(Patient(nom="Youssef Amrani", telephone="0633333333"))
    medecin = UtilisateurRepo(db_path).insert(Utilisateur(login="dr.kettani", type=TypeUtilisateur.MEDECIN))
    assistant = UtilisateurRepo(db_path).insert(Utilisateur(login="nadia", type=TypeUtilisateur.ASSISTANT))
    cat = CategorieRepo(db_path).insert(Categorie(designation="Routine"))
    service = ConsultationService.from_db(db_path, horloge=lambda: MAINTENANT)
    return {
        "db": db_path, "service": service, "patient": patient,
        "medecin": medecin, "assistant": assistant, "cat": cat,
    }


def _nouvelle(env, quand, prix="150", **kw):
    champs = dict(
        date=quand,
        prix=Decimal(prix),
        patient_id=env["patient"].id,
        categorie_id=env["cat"].id,
        medecin_id=env["medecin"].id,
    )
    champs.update(kw)
    return Consultation(**champs)


def test_creer_consultation(env):
    c = env["service"].creer_consultation(_nouvelle(env, datetime(2024, 3, 16, 10, 0), est_payee=True))
    assert c.id is not None
    lu = env["service"].get_consultation(c.id)
    assert lu.est_payee is False
    assert lu.prix == Decimal("150.00")


def test_creer_consultation_passee(env):
    with pytest.raises(ValidationError) as exc:
        env["service"].creer_consultation(_nouvelle(env, datetime(2024, 3, 15, 11, 59)))
    assert exc.value.champ == "date"


@pytest.mark.parametrize("prix", ["0", "-10"])
def test_creer_consultation_prix_invalide(env, prix):
    with pytest.raises(ValidationError) as exc:
        env["service"].creer_consultation(_nouvelle(env, datetime(2024, 3, 16, 10), prix=prix))
    assert exc.value.champ == "prix"


def test_creer_consultation_references(env):
    service = env["service"]
    with pytest.raises(NotFoundError):
        service.creer_consultation(_nouvelle(env, datetime(2024, 3, 16, 10), patient_id=999))
    with pytest.raises(NotFoundError):
        service.creer_consultation(_nouvelle(env, datetime(2024, 3, 16, 10), categorie_id=999))
    with pytest.raises(NotFoundError):
        service.creer_consultation(_nouvelle(env, datetime(2024, 3, 16, 10), medecin_id=999))
    with pytest.raises(BusinessError):
        service.creer_consultation(_nouvelle(env, datetime(2024, 3, 16, 10), medecin_id=env["assistant"].id))


def test_creneau_occupe(env):
    service = env["service"]
    service.creer_consultation(_nouvelle(env, datetime(2024, 3, 16, 10, 0)))
    with pytest.raises(BusinessError):
        service.creer_consultation(_nouvelle(env, datetime(2024, 3, 16, 10, 15)))
    service.creer_consultation(_nouvelle(env, datetime(2024, 3, 16, 10, 45)))


def test_creneau_parametrable(env):
    ParamsRepo(env["db"]).set_many([("creneau_minutes", "60")])
    service = env["service"]
    service.creer_consultation(_nouvelle(env, datetime(2024, 3, 16, 10, 0)))
    with pytest.raises(BusinessError):
        service.creer_consultation(_nouvelle(env, datetime(2024, 3, 16, 10, 45)))


def test_valider_paiement(env):
    service = env["service"]
    c = service.creer_consultation(_nouvelle(env, datetime(2024, 3, 16, 10, 0)))
    assert service.valider_paiement(c.id)
    assert service.get_consultation(c.id).est_payee
    with pytest.raises(BusinessError):
        service.valider_paiement(c.id)
    with pytest.raises(NotFoundError):
        service.valider_paiement(12345)


def test_modifier_conserve_paiement(env):
    service = env["service"]
    c = service.creer_consultation(_nouvelle(env, datetime(2024, 3, 16, 10, 0)))
    service.valider_paiement(c.id)

    modif = service.get_consultation(c.id)
    modif.prix = Decimal("200")
    modif.est_payee = False
    modif.date = datetime(2024, 3, 16, 10, 10)
    res = service.modifier_consultation(modif)

    assert res.est_payee is True
    lu = service.get_consultation(c.id)
    assert lu.prix == Decimal("200.00")
    assert lu.est_payee is True


def test_consultation_passee_non_modifiable(env):
    passee = ConsultationRepo(env["db"]).insert(_nouvelle(env, datetime(2024, 3, 1, 9, 0)))
    service = env["service"]
    with pytest.raises(BusinessError):
        service.modifier_consultation(passee)
    with pytest.raises(BusinessError):
        service.annuler_consultation(passee.id)
    # le paiement reste possible après la visite
    assert service.valider_paiement(passee.id)


def test_annuler_consultation(env):
    service = env["service"]
    c = service.creer_consultation(_nouvelle(env, datetime(2024, 3, 20, 9, 0)))
    assert service.annuler_consultation(c.id)
    with pytest.raises(NotFoundError):
        service.get_consultation(c.id)


def test_lectures(env):
    service = env["service"]
    repo = ConsultationRepo(env["db"])
    repo.insert(_nouvelle(env, datetime(2024, 3, 14, 9, 0)))
    service.creer_consultation(_nouvelle(env, datetime(2024, 3, 16, 9, 0)))
    service.creer_consultation(_nouvelle(env, datetime(2024, 3, 17, 9, 0)))
    service.creer_consultation(_nouvelle(env, datetime(2024, 4, 2, 9, 0)))

    medecin_id = env["medecin"].id
    assert len(service.lister()) == 4
    assert len(service.consultations_du_jour(date(2024, 3, 16))) == 1
    assert len(service.consultations_journalieres(medecin_id, date(2024, 3, 17))) == 1
    assert [c.date.day for c in service.consultations_futures_medecin(medecin_id)] == [16, 17, 2]
    assert len(service.consultations_patient(env["patient"].id)) == 4
    assert len(service.consultations_non_payees()) == 4
    assert [c.date.day for c in service.patients_a_relancer()] == [16, 17]
    assert service.patients_a_relancer(date(2024, 4, 1))[0].date == datetime(2024, 4, 2, 9, 0)
    assert len(service.consultations_du_mois(3, 2024)) == 3


def test_passee_ou_a_venir(env):
    c = _nouvelle(env, datetime(2024, 3, 15, 12, 0))
    assert not c.is_passee(MAINTENANT) and not c.is_a_venir(MAINTENANT)
    assert c.is_passee(datetime(2024, 3, 15, 12, 1))
    assert c.is_a_venir(datetime(2024, 3, 15, 11, 59))
