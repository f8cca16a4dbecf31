from datetime import date, datetime
from decimal import Decimal

import pytest

from cabinet.adapters.parsers import (
    format_date_heure,
    parse_date,
    parse_date_heure,
    parse_periode,
    parse_prix,
)
from cabinet.domain.errors import ValidationError


@pytest.mark.parametrize(
    "txt,attendu",
    [
        ("150", Decimal("150")),
        ("150,50 DH", Decimal("150.50")),
        ("1 250.5", Decimal("1250.5")),
        ("1 000,00", Decimal("1000.00")),
        ("  80.00  ", Decimal("80.00")),
    ],
)
def test_parse_prix(txt, attendu):
    assert parse_prix(txt) == attendu


@pytest.mark.parametrize("txt", ["", None, "gratuit"])
def test_parse_prix_invalide(txt):
    with pytest.raises(ValidationError) as exc:
        parse_prix(txt)
    assert exc.value.champ == "prix"


def test_parse_date():
    assert parse_date("15/03/2024") == date(2024, 3, 15)
    assert parse_date("2024-03-15") == date(2024, 3, 15)
    with pytest.raises(ValidationError):
        parse_date("31/02/2024")
    with pytest.raises(ValidationError):
        parse_date("")


def test_parse_date_heure():
    assert parse_date_heure("15/03/2024", "09:30") == datetime(2024, 3, 15, 9, 30)
    with pytest.raises(ValidationError) as exc:
        parse_date_heure("15/03/2024", "9h30")
    assert exc.value.champ == "heure"
    with pytest.raises(ValidationError):
        parse_date_heure("15/03/2024", None)


@pytest.mark.parametrize(
    "txt,attendu",
    [
        ("03/2024", (3, 2024)),
        ("3-2024", (3, 2024)),
        ("2024-03", (3, 2024)),
        (" 12/1999 ", (12, 1999)),
    ],
)
def test_parse_periode(txt, attendu):
    assert parse_periode(txt) == attendu


@pytest.mark.parametrize("txt", ["13/2024", "00/2024", "mars 2024", "", None])
def test_parse_periode_invalide(txt):
    with pytest.raises(ValidationError):
        parse_periode(txt)


def test_format_date_heure():
    assert format_date_heure(datetime(2024, 3, 5, 8, 0)) == "05/03/2024 08:00"
    assert format_date_heure(None) == ""
