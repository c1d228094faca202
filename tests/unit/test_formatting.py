from datetime import date, datetime, timezone

from wavy.services.formatting import datetime_label, month_label, short_day_label


def test_month_label() -> None:
    assert month_label("2024-03") == "mars 2024"
    assert month_label("2023-12") == "décembre 2023"


def test_month_label_leaves_bad_input_alone() -> None:
    assert month_label("2024-13") == "2024-13"
    assert month_label("2024-00") == "2024-00"
    assert month_label("mars") == "mars"


def test_short_day_label() -> None:
    assert short_day_label(date(2024, 3, 4)) == "lun. 4 mars"


def test_datetime_label_uses_paris_time() -> None:
    # 13:05 UTC is 14:05 in Paris in winter
    assert datetime_label(datetime(2024, 3, 4, 13, 5, tzinfo=timezone.utc)) == "4 mars 2024 à 14:05"
    assert datetime_label(datetime(2024, 3, 4, 13, 5)) == "4 mars 2024 à 14:05"
