from datetime import datetime, timedelta

from docshare.utils import (
    generate_link_token,
    generate_stored_name,
    is_link_expired,
    is_view_limit_reached,
    parse_expires_at,
)

NOW = datetime(2026, 3, 1, 9, 30)


def test_link_token_is_256_bit_hex():
    token = generate_link_token()
    assert len(token) == 64
    int(token, 16)


def test_stored_name_keeps_original_name_and_extension():
    name = generate_stored_name("../../etc/Annual Report.docx")
    assert name.endswith("-Annual Report.docx")
    assert "/" not in name


def test_parse_expires_at():
    assert parse_expires_at(None, NOW) is None
    assert parse_expires_at(36, NOW) == NOW + timedelta(hours=36)


def test_is_link_expired():
    assert is_link_expired(None, NOW) is False
    assert is_link_expired(NOW + timedelta(seconds=1), NOW) is False
    assert is_link_expired(NOW - timedelta(seconds=1), NOW) is True


def test_is_view_limit_reached():
    assert is_view_limit_reached(100, None) is False
    assert is_view_limit_reached(2, 3) is False
    assert is_view_limit_reached(3, 3) is True
