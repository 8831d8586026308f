from datetime import date, datetime, timedelta, timezone

from student_records.utils.tz import (
    UTC,
    as_utc,
    iso_utc,
    today_utc_midnight,
    utc_midnight,
)


def test_as_utc_assumes_naive_is_utc():
    naive = datetime(2025, 9, 10, 17, 0)
    assert as_utc(naive) == datetime(2025, 9, 10, 17, 0, tzinfo=UTC)


def test_as_utc_converts_aware():
    local = datetime(2025, 9, 10, 14, 0, tzinfo=timezone(timedelta(hours=-3)))
    assert as_utc(local) == datetime(2025, 9, 10, 17, 0, tzinfo=UTC)


def test_utc_midnight():
    assert utc_midnight(date(2010, 5, 1)) == datetime(2010, 5, 1, tzinfo=UTC)


def test_today_utc_midnight_uses_utc_date():
    # 22:00 em UTC-3 já é o dia seguinte em UTC
    late_local = datetime(2025, 1, 31, 22, 0, tzinfo=timezone(timedelta(hours=-3)))
    assert today_utc_midnight(late_local) == datetime(2025, 2, 1, tzinfo=UTC)


def test_iso_utc_has_Z_suffix():
    dtu = datetime(2025, 9, 10, 17, 0, tzinfo=UTC)
    assert iso_utc(dtu) == "2025-09-10T17:00:00Z"
    assert iso_utc(datetime(2025, 9, 10, 17, 0)).endswith("Z")
