from __future__ import annotations

import pytest

from mail_compose import Address, InvalidAddressError, InvalidHeaderError, parse_address, validate_header
from mail_compose import validate_email_address


# ---------------------------------------------------------------------------
# parse_address
# ---------------------------------------------------------------------------


@pytest.mark.os_agnostic
def test_parse_address_splits_bare_addr_spec() -> None:
    address = parse_address("user@example.com")

    assert address == Address(local_part="user", domain="example.com", display_name=None)
    assert address.addr_spec == "user@example.com"
    assert str(address) == "user@example.com"


@pytest.mark.os_agnostic
def test_parse_address_reads_display_name_from_name_addr_form() -> None:
    address = parse_address("  Jane Doe <jane@example.com> ")

    assert address.display_name == "Jane Doe"
    assert address.addr_spec == "jane@example.com"


@pytest.mark.os_agnostic
def test_parse_address_unquotes_display_name() -> None:
    address = parse_address('"Doe, Jane" <jane@example.com>')

    assert address.display_name == "Doe, Jane"


@pytest.mark.os_agnostic
def test_explicit_display_name_wins_over_embedded_one() -> None:
    address = parse_address("Jane <jane@example.com>", "Reply To")

    assert address.display_name == "Reply To"
    assert str(address) == "Reply To <jane@example.com>"


@pytest.mark.os_agnostic
def test_parse_address_keeps_long_addresses_intact() -> None:
    address = parse_address("abcdefghijklmnopqrst@abcdefghijklmnopqrst.com.bd")

    assert address.local_part == "abcdefghijklmnopqrst"
    assert address.domain == "abcdefghijklmnopqrst.com.bd"


@pytest.mark.os_agnostic
@pytest.mark.parametrize(
    ("raw", "reason"),
    [
        ("", "address is empty"),
        ("   ", "address is empty"),
        ("bareword", "exactly one '@'"),
        ("a@b@example.com", "exactly one '@'"),
        ("user@", "domain is empty"),
        ("@example.com", "local part is empty"),
        ("us er@example.com", "whitespace"),
        ("Jane <ja ne@example.com>", "whitespace"),
        ("a,b@example.com", 'illegal character ","'),
        ("<>", "exactly one '@'"),
    ],
)
def test_parse_address_rejects_malformed_input(raw: str, reason: str) -> None:
    with pytest.raises(InvalidAddressError, match="invalid email address") as excinfo:
        parse_address(raw)

    assert reason in str(excinfo.value)


@pytest.mark.os_agnostic
def test_parse_address_rejects_none() -> None:
    with pytest.raises(InvalidAddressError, match="address is missing"):
        parse_address(None)


@pytest.mark.os_agnostic
def test_invalid_address_error_names_the_field() -> None:
    with pytest.raises(InvalidAddressError) as excinfo:
        parse_address("invalid@", field="to")

    assert excinfo.value.field == "to"
    assert "for to" in str(excinfo.value)


@pytest.mark.os_agnostic
def test_invalid_address_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        validate_email_address("bareword")


@pytest.mark.os_agnostic
def test_validate_email_address_accepts_valid() -> None:
    validate_email_address("a.b@c.org")


@pytest.mark.os_agnostic
def test_header_address_rendering_keeps_display_name() -> None:
    header_address = parse_address("r@example.com", "Reply To").to_header_address()

    assert header_address.addr_spec == "r@example.com"
    assert header_address.display_name == "Reply To"


# ---------------------------------------------------------------------------
# validate_header
# ---------------------------------------------------------------------------


@pytest.mark.os_agnostic
def test_validate_header_accepts_empty_value() -> None:
    validate_header("X-Empty", "")


@pytest.mark.os_agnostic
@pytest.mark.parametrize(
    ("name", "value", "reason"),
    [
        (None, "testValue", "name is missing"),
        ("", "testValue", "name must not be empty"),
        ("X-HEADER", None, "value is missing"),
        ("X HEADER", "testValue", "illegal characters"),
        ("X:HEADER", "testValue", "illegal characters"),
        ("X-HEADER", "a\r\nBcc: victim@example.com", "line breaks"),
    ],
)
def test_validate_header_rejects_bad_pairs(name: str | None, value: str | None, reason: str) -> None:
    with pytest.raises(InvalidHeaderError, match=reason) as excinfo:
        validate_header(name, value)

    assert excinfo.value.field == "headers"
