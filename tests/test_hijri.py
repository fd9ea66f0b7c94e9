from datetime import date

from waktu_dashboard.plugins.hijri.hijri_calendar import (
    days_in_hijri_month,
    get_hijri_month_data,
    gregorian_to_hijri,
)


def test_new_year_1446():
    hijri = gregorian_to_hijri(date(2024, 7, 8))
    assert (hijri.day, hijri.month, hijri.year) == (1, 1, 1446)
    assert str(hijri) == "1 Muharram 1446H"


def test_last_day_of_1445():
    hijri = gregorian_to_hijri(date(2024, 7, 7))
    assert (hijri.day, hijri.month, hijri.year) == (30, 12, 1445)
    assert hijri.month_name == "Zulhijjah"


def test_month_lengths_alternate():
    assert days_in_hijri_month(1) == 29
    assert days_in_hijri_month(2) == 30
    assert days_in_hijri_month(12) == 30


def test_month_data():
    data = get_hijri_month_data(date(2024, 7, 8))
    assert data.month_name == "Muharram"
    assert data.year == 1446
    assert len(data.days) == 29
    assert [d["day"] for d in data.days if d["is_today"]] == [1]
    # 8 July 2024 was a Monday
    assert data.first_day_of_week == 1
    assert data.as_dict()["today"] == {"day": 1, "month": "Muharram", "year": 1446}


def test_first_day_of_week_mid_month():
    # Wednesday 17 July 2024 is 10 Muharram, so the month started on a Monday
    data = get_hijri_month_data(date(2024, 7, 17))
    assert data.today.day == 10
    assert data.first_day_of_week == 1
