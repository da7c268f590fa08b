import time

import pytest

from facturier.utils.formatage import format_date_fr, format_money, format_quantity, format_rate


def test_format_money_truncates_to_unit():
    assert format_money(11925.9) == "11925 FCFA"
    assert format_money("3500") == "3500 FCFA"


@pytest.mark.parametrize("value", [None, "abc", float("nan"), float("inf"), float("-inf")])
def test_format_money_unreadable_amount_is_zero(value):
    assert format_money(value) == "0 FCFA"


def test_quantity_and_rate():
    assert format_quantity(3.0) == "3"
    assert format_quantity(2.5) == "2.5"
    assert format_rate(18) == "18"
    assert format_rate(19.25) == "19.25"


def test_format_date_fr_naive_and_invalid():
    assert format_date_fr("2024-03-05T10:15:00") == "05/03/2024"
    assert format_date_fr("2024-03-05") == "05/03/2024"
    assert format_date_fr("pas une date") == ""
    assert format_date_fr(None) == ""


@pytest.fixture
def local_tz(monkeypatch):
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset indisponible sur cette plateforme")

    def _set(name):
        monkeypatch.setenv("TZ", name)
        time.tzset()

    yield _set
    monkeypatch.undo()
    time.tzset()


def test_format_date_fr_uses_local_timezone(local_tz):
    # 02:00 UTC le 6 mars = 21:00 le 5 mars à UTC-5
    local_tz("EST5")
    assert format_date_fr("2024-03-06T02:00:00Z") == "05/03/2024"

    local_tz("UTC0")
    assert format_date_fr("2024-03-06T02:00:00Z") == "06/03/2024"
