from datetime import datetime

from portal.submissions import format_date, format_file_size, make_storage_key


def test_format_file_size_units():
    assert format_file_size(0) == "0 Bytes"
    assert format_file_size(512) == "512 Bytes"
    assert format_file_size(1024) == "1 KB"
    assert format_file_size(1536) == "1.5 KB"
    assert format_file_size(20 * 1024 * 1024) == "20 MB"
    assert format_file_size(3 * 1024 ** 3) == "3 GB"


def test_format_file_size_rounds_to_two_decimals():
    # 1234567 / 1024**2 = 1.1773...
    assert format_file_size(1234567) == "1.18 MB"
    assert format_file_size(1029) == "1 KB"
    assert format_file_size(1030) == "1.01 KB"


def test_format_file_size_caps_at_gb():
    assert format_file_size(2 * 1024 ** 4) == "2048 GB"
    assert format_file_size(1_000_000 * 1024 ** 3) == "1000000 GB"
    assert format_file_size(1_500_000 * 1024 ** 3 + 1024 ** 3 // 4) == "1500000.25 GB"


def test_format_date():
    dt = datetime(2026, 3, 5, 16, 7)
    assert format_date(dt) == "Mar 5, 2026, 04:07 PM"
    assert format_date("2026-10-19T09:30:00Z") == "Oct 19, 2026, 09:30 AM"
    assert format_date(None) == ""


def test_storage_key_is_namespaced_by_owner():
    key = make_storage_key(42, "Final Deck.PPTX", now_ms=1700000000123)
    owner, name = key.split("/")
    assert owner == "42"
    assert name.startswith("1700000000123-")
    assert name.endswith(".pptx")


def test_storage_keys_differ_within_one_millisecond():
    keys = {make_storage_key(1, "a.pdf", now_ms=5) for _ in range(50)}
    assert len(keys) == 50


def test_storage_key_extension_falls_back_to_mime():
    key = make_storage_key(1, "README", "application/pdf", now_ms=1)
    assert key.endswith(".pdf")
    key2 = make_storage_key(1, "weird.p?f", "application/vnd.ms-powerpoint", now_ms=1)
    assert key2.endswith(".ppt")
