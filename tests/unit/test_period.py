"""Unit tests for calendar periods and request-boundary helpers."""

import pytest
from datetime import date
from uuid import UUID
from fastapi import HTTPException

from crewledger.fastapi.core.utils import legacy_uuid, normalize_name, parse_period_param
from crewledger.payroll.exceptions import InvalidInputError
from crewledger.payroll.period import Period


def test_parse_and_format():
    period = Period.parse("2024-03")

    assert period == Period(2024, 3)
    assert str(period) == "2024-03"
    assert period.label == "March 2024"


@pytest.mark.parametrize("value", ["2024-13", "2024-00", "March", "", "24-03", "2024/03"])
def test_invalid_periods_are_rejected(value):
    with pytest.raises(InvalidInputError):
        Period.parse(value)


def test_contains_only_its_own_month():
    march = Period(2024, 3)

    assert march.contains(date(2024, 3, 1))
    assert march.contains(date(2024, 3, 31))
    assert not march.contains(date(2024, 4, 1))
    assert not march.contains(date(2023, 3, 15))


def test_previous_wraps_the_year():
    assert Period(2024, 3).previous() == Period(2024, 2)
    assert Period(2024, 1).previous() == Period(2023, 12)


@pytest.mark.parametrize("label, expected", [
    ("March 2024", Period(2024, 3)),
    ("2024-03", Period(2024, 3)),
    ("december 2023", Period(2023, 12)),
    ("sometime", None),
    ("", None),
])
def test_from_label(label, expected):
    assert Period.from_label(label) == expected


def test_periods_order_chronologically():
    assert sorted([Period(2024, 2), Period(2023, 12), Period(2024, 1)]) == [
        Period(2023, 12), Period(2024, 1), Period(2024, 2)
    ]


def test_parse_period_param_maps_to_422():
    with pytest.raises(HTTPException) as exc_info:
        parse_period_param("2024-3x")

    assert exc_info.value.status_code == 422


def test_legacy_uuid_is_stable():
    existing = "123e4567-e89b-12d3-a456-426614174000"

    assert legacy_uuid(existing) == UUID(existing)
    assert legacy_uuid("1709625600000") == legacy_uuid("1709625600000")
    assert legacy_uuid("1709625600000") != legacy_uuid("1709625600001")


def test_normalize_name():
    assert normalize_name("  Ayu   Lestari ") == "Ayu Lestari"
    assert normalize_name("") == ""
