"""Address parsing turning raw caller strings into :class:`Address` values.

Purpose
-------
Every address the builder stores (sender, recipients, reply-to, bounce) passes
through :func:`parse_address`, so syntax rules live in one place.

Contents
--------
* :class:`Address` – frozen ``local_part@domain`` with optional display name.
* :func:`parse_address` – strict syntax check, raises
  :class:`~mail_compose.errors.InvalidAddressError`.
* :func:`validate_email_address` – boolean-free guard for callers that only
  need the check.

System Role
-----------
Leaf module. Syntax only: no DNS lookups, no deliverability checks.
"""

from __future__ import annotations

from dataclasses import dataclass
from email.headerregistry import Address as HeaderAddress
from email.utils import formataddr
import re

from .errors import InvalidAddressError


#: ``Display Name <local@domain>``; the name part may be quoted.
_NAME_ADDR_PATTERN = re.compile(r"(?P<name>[^<>]*?)\s*<(?P<spec>[^<>]*)>")

_ILLEGAL_CHARACTERS = frozenset('<>(),;:"[]\\')


@dataclass(frozen=True)
class Address:
    """Parsed mailbox ready for header rendering.

    Fields
    ------
    local_part:
        Text left of the ``@``.
    domain:
        Text right of the ``@``.
    display_name:
        Optional human readable name, stored as given (no line breaks).
    """

    local_part: str
    domain: str
    display_name: str | None = None

    @property
    def addr_spec(self) -> str:
        return f"{self.local_part}@{self.domain}"

    def to_header_address(self) -> HeaderAddress:
        """Return the standard-library representation used for MIME headers."""

        return HeaderAddress(
            display_name=self.display_name or "",
            username=self.local_part,
            domain=self.domain,
        )

    def __str__(self) -> str:
        if self.display_name:
            return formataddr((self.display_name, self.addr_spec))
        return self.addr_spec


def parse_address(raw: str | None, display_name: str | None = None, *, field: str = "address") -> Address:
    """Parse ``raw`` into an :class:`Address` or raise.

    Why
        The builder must reject malformed input at the call that supplied it,
        before anything is stored.

    Inputs
    ------
    raw:
        Bare addr-spec (``user@example.com``) or name-addr form
        (``Jane Doe <user@example.com>``). Surrounding whitespace is trimmed.
    display_name:
        Explicit display name; wins over a name embedded in ``raw``. Must not
        contain line breaks, since it ends up in a header.
    field:
        Builder field being populated, echoed in the error message.

    Outputs
    -------
    Address
        Immutable parsed address.

    Side Effects
    ------------
    None.

    Examples
    --------
    >>> parse_address("Jane Doe <jane@example.com>")
    Address(local_part='jane', domain='example.com', display_name='Jane Doe')
    >>> parse_address("user@")
    Traceback (most recent call last):
    ...
    mail_compose.errors.InvalidAddressError: invalid email address "user@" for address: domain is empty
    """

    if raw is None:
        raise InvalidAddressError(raw, "address is missing", field=field)
    if not isinstance(raw, str):  # pyright: ignore[reportUnnecessaryIsInstance]
        raise InvalidAddressError(raw, "address must be a string", field=field)

    candidate = raw.strip()
    if not candidate:
        raise InvalidAddressError(raw, "address is empty", field=field)

    embedded_name: str | None = None
    match = _NAME_ADDR_PATTERN.fullmatch(candidate)
    if match is not None:
        embedded_name = match.group("name").strip().strip('"').strip() or None
        candidate = match.group("spec").strip()

    local_part, domain = _split_addr_spec(candidate, raw=raw, field=field)
    name = display_name if display_name is not None else embedded_name
    if name is not None and ("\r" in name or "\n" in name):
        raise InvalidAddressError(raw, "display name must not contain line breaks", field=field)
    return Address(local_part=local_part, domain=domain, display_name=name)


def validate_email_address(raw: str | None) -> None:
    """Raise :class:`InvalidAddressError` when ``raw`` is not a valid address."""

    parse_address(raw)


def _split_addr_spec(addr_spec: str, *, raw: str, field: str) -> tuple[str, str]:
    if any(character.isspace() for character in addr_spec):
        raise InvalidAddressError(raw, "address contains whitespace", field=field)
    if addr_spec.count("@") != 1:
        raise InvalidAddressError(raw, "expected exactly one '@'", field=field)

    local_part, domain = addr_spec.split("@")
    if not local_part:
        raise InvalidAddressError(raw, "local part is empty", field=field)
    if not domain:
        raise InvalidAddressError(raw, "domain is empty", field=field)

    illegal = sorted(_ILLEGAL_CHARACTERS.intersection(addr_spec))
    if illegal:
        raise InvalidAddressError(raw, f'illegal character "{illegal[0]}"', field=field)
    return local_part, domain
