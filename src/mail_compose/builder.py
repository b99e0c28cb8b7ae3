"""Mutable message builder enforcing validate-eagerly, build-once semantics.

Purpose
-------
Accumulate sender, recipients, headers, reply-to addresses, subject, send
date, body and transport fields, then freeze them into an
:class:`~mail_compose.message.EmailMessage` exactly once.

Contents
--------
* :class:`EmailMessageBuilder` – the mutable state holder.

System Role
-----------
Each mutator validates its input before touching state, so a failed call
leaves the builder exactly as it was. ``build()`` is the single one-way
transition; afterwards message-content mutators refuse to run while transport
setters remain available to :func:`~mail_compose.session.get_session_config`
unless injected session properties are in force.
A builder belongs to one caller and is not safe for concurrent use.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime
import logging
from types import MappingProxyType

from .address import Address, parse_address
from .errors import (
    AlreadyBuiltError,
    InvalidAddressError,
    InvalidHeaderError,
    MissingFromAddressError,
    NoRecipientsError,
    SessionAlreadyInjectedError,
)
from .headers import validate_header
from .message import BodySubtype, EmailMessage, MessageBody
from .settings import TransportSettings


logger = logging.getLogger("mail_compose")


class EmailMessageBuilder:
    """Compose an outbound message field by field.

    Examples
    --------
    >>> builder = EmailMessageBuilder()
    >>> message = (
    ...     builder.set_from("sender@example.com")
    ...     .add_to(["a@example.com", "b@example.com"])
    ...     .set_subject("Hello")
    ...     .build()
    ... )
    >>> [address.addr_spec for address in message.to]
    ['a@example.com', 'b@example.com']
    >>> builder.build()
    Traceback (most recent call last):
    ...
    mail_compose.errors.AlreadyBuiltError: message was already built, build is not allowed
    """

    def __init__(self) -> None:
        self._from: Address | None = None
        self._to: list[Address] = []
        self._cc: list[Address] = []
        self._bcc: list[Address] = []
        self._reply_to: list[Address] = []
        self._headers: dict[str, str] = {}
        self._subject: str | None = None
        self._sent_date: datetime | None = None
        self._body: MessageBody | None = None
        self._built = False
        self.transport = TransportSettings()

    # -- read access ---------------------------------------------------------

    @property
    def built(self) -> bool:
        return self._built

    @property
    def from_address(self) -> Address | None:
        return self._from

    @property
    def to_addresses(self) -> list[Address]:
        return list(self._to)

    @property
    def cc_addresses(self) -> list[Address]:
        return list(self._cc)

    @property
    def bcc_addresses(self) -> list[Address]:
        return list(self._bcc)

    @property
    def reply_to_addresses(self) -> list[Address]:
        return list(self._reply_to)

    @property
    def headers(self) -> Mapping[str, str]:
        return MappingProxyType(self._headers)

    @property
    def subject(self) -> str | None:
        return self._subject

    @property
    def sent_date(self) -> datetime | None:
        return self._sent_date

    @property
    def body(self) -> MessageBody | None:
        return self._body

    @property
    def host_name(self) -> str | None:
        """Host from injected session properties, else the explicitly set one."""

        return self.transport.resolved_host_name()

    @property
    def smtp_port(self) -> int | None:
        return self.transport.smtp_port

    @property
    def bounce_address(self) -> Address | None:
        return self.transport.bounce_address

    @property
    def socket_connection_timeout(self) -> int:
        return self.transport.socket_timeout_ms

    @property
    def session_properties(self) -> Mapping[str, str] | None:
        properties = self.transport.session_properties
        return None if properties is None else MappingProxyType(properties)

    # -- message content -----------------------------------------------------

    def set_from(self, raw: str, display_name: str | None = None) -> EmailMessageBuilder:
        """Replace the sender; raises :class:`InvalidAddressError` on bad syntax."""

        self._ensure_mutable("set_from")
        self._from = parse_address(raw, display_name, field="from")
        return self

    def add_to(self, addresses: str | Sequence[str]) -> EmailMessageBuilder:
        """Append ``to`` recipients in order; all-or-nothing on invalid input.

        Why
            A partially applied recipient list would silently drop mail for
            the addresses after the bad one.

        Inputs
        ------
        addresses:
            A single address or a sequence of addresses. Duplicates are kept.

        Side Effects
        ------------
        Extends the ``to`` list only when every address parses.
        """

        self._ensure_mutable("add_to")
        self._to.extend(_parse_recipients(addresses, field="to"))
        return self

    def add_cc(self, addresses: str | Sequence[str]) -> EmailMessageBuilder:
        self._ensure_mutable("add_cc")
        self._cc.extend(_parse_recipients(addresses, field="cc"))
        return self

    def add_bcc(self, addresses: str | Sequence[str]) -> EmailMessageBuilder:
        self._ensure_mutable("add_bcc")
        self._bcc.extend(_parse_recipients(addresses, field="bcc"))
        return self

    def set_to(self, addresses: str | Sequence[str]) -> EmailMessageBuilder:
        """Replace the ``to`` list; the old list survives a failed call."""

        self._ensure_mutable("set_to")
        self._to = _parse_recipients(addresses, field="to")
        return self

    def set_cc(self, addresses: str | Sequence[str]) -> EmailMessageBuilder:
        self._ensure_mutable("set_cc")
        self._cc = _parse_recipients(addresses, field="cc")
        return self

    def set_bcc(self, addresses: str | Sequence[str]) -> EmailMessageBuilder:
        self._ensure_mutable("set_bcc")
        self._bcc = _parse_recipients(addresses, field="bcc")
        return self

    def add_reply_to(self, raw: str, display_name: str | None = None) -> EmailMessageBuilder:
        """Append a reply-to address; ``display_name`` is stored as given."""

        self._ensure_mutable("add_reply_to")
        self._reply_to.append(parse_address(raw, display_name, field="reply_to"))
        return self

    def add_header(self, name: str, value: str) -> EmailMessageBuilder:
        """Insert or overwrite a custom header.

        Names match case-insensitively, as mail headers do: an overwrite keeps
        the spelling and position of the first insertion and replaces only
        the value. Raises :class:`InvalidHeaderError` without touching the
        mapping when ``name`` is missing/empty or ``value`` is ``None``.
        """

        self._ensure_mutable("add_header")
        validate_header(name, value)
        _upsert_header(self._headers, name, value)
        return self

    def set_headers(self, headers: Mapping[str, str]) -> EmailMessageBuilder:
        """Replace every custom header after validating all pairs."""

        self._ensure_mutable("set_headers")
        replacement: dict[str, str] = {}
        for name, value in headers.items():
            validate_header(name, value)
            _upsert_header(replacement, name, value)
        self._headers = replacement
        return self

    def set_subject(self, subject: str | None) -> EmailMessageBuilder:
        """Replace the subject; raises :class:`InvalidHeaderError` on line breaks."""

        self._ensure_mutable("set_subject")
        if subject is not None and ("\r" in subject or "\n" in subject):
            raise InvalidHeaderError("Subject", "value must not contain line breaks", field="subject")
        self._subject = subject
        return self

    def set_sent_date(self, sent_date: datetime | None) -> EmailMessageBuilder:
        self._ensure_mutable("set_sent_date")
        self._sent_date = sent_date
        return self

    def set_body(self, content: str, subtype: BodySubtype = "plain") -> EmailMessageBuilder:
        self._ensure_mutable("set_body")
        self._body = MessageBody(content=content, subtype=subtype)
        return self

    # -- transport -----------------------------------------------------------

    def set_session_properties(self, properties: Mapping[str, str] | None) -> EmailMessageBuilder:
        """Adopt an existing session's ``mail.smtp.*`` properties; ``None`` clears them.

        Why
            Callers that already hold a configured session hand it over
            instead of repeating every transport setting.

        What
            Stores a copy, so later changes to ``properties`` are not seen.
            While set, :func:`~mail_compose.session.get_session_config` reads
            these properties alone (``host_name`` only fills in a missing
            ``mail.smtp.host``) and the other transport setters refuse to run.
        """

        self.transport.session_properties = None if properties is None else dict(properties)
        return self

    def set_host_name(self, host_name: str | None) -> EmailMessageBuilder:
        self._ensure_no_injected_session("set_host_name")
        self.transport.host_name = host_name
        return self

    def set_smtp_port(self, port: int | None) -> EmailMessageBuilder:
        self._ensure_no_injected_session("set_smtp_port")
        self.transport.smtp_port = port
        return self

    def set_ssl_on_connect(self, enabled: bool) -> EmailMessageBuilder:
        self._ensure_no_injected_session("set_ssl_on_connect")
        self.transport.ssl_on_connect = enabled
        return self

    def set_start_tls_enabled(self, enabled: bool) -> EmailMessageBuilder:
        self._ensure_no_injected_session("set_start_tls_enabled")
        self.transport.start_tls_enabled = enabled
        return self

    def set_start_tls_required(self, required: bool) -> EmailMessageBuilder:
        self._ensure_no_injected_session("set_start_tls_required")
        self.transport.start_tls_required = required
        return self

    def set_ssl_check_server_identity(self, enabled: bool) -> EmailMessageBuilder:
        self._ensure_no_injected_session("set_ssl_check_server_identity")
        self.transport.ssl_check_server_identity = enabled
        return self

    def set_bounce_address(self, raw: str | None) -> EmailMessageBuilder:
        """Set the envelope sender; ``None`` clears it."""

        self._ensure_no_injected_session("set_bounce_address")
        self.transport.bounce_address = None if raw is None else parse_address(raw, field="bounce_address")
        return self

    def set_socket_connection_timeout(self, timeout_ms: int) -> EmailMessageBuilder:
        """Set the connection and read timeout in milliseconds, carried as-is."""

        self._ensure_no_injected_session("set_socket_connection_timeout")
        self.transport.socket_timeout_ms = timeout_ms
        return self

    # -- terminal ------------------------------------------------------------

    def build(self) -> EmailMessage:
        """Freeze the builder into an :class:`EmailMessage`.

        Why
            Cross-field rules (sender present, at least one recipient) can
            only be checked once composition is finished.

        What
            Checks state, validates required fields, copies every field into
            an immutable snapshot and marks the builder as built.

        Outputs
        -------
        EmailMessage
            Snapshot sharing no mutable state with the builder. ``subject``
            defaults to ``""``.

        Raises
        ------
        AlreadyBuiltError
            On any call after the first successful one.
        MissingFromAddressError
            When no sender was set.
        NoRecipientsError
            When ``to``, ``cc`` and ``bcc`` are all empty.
        """

        if self._built:
            raise AlreadyBuiltError("build")
        if self._from is None:
            raise MissingFromAddressError()
        if not (self._to or self._cc or self._bcc):
            raise NoRecipientsError()

        message = EmailMessage(
            from_address=self._from,
            to=tuple(self._to),
            cc=tuple(self._cc),
            bcc=tuple(self._bcc),
            reply_to=tuple(self._reply_to),
            headers=MappingProxyType(dict(self._headers)),
            subject=self._subject if self._subject is not None else "",
            sent_date=self._sent_date,
            body=self._body,
        )
        self._built = True
        logger.debug(
            'built message from "%s" for %d recipient(s)',
            message.from_address.addr_spec,
            len(message.envelope_recipients()),
        )
        return message

    def _ensure_mutable(self, operation: str) -> None:
        if self._built:
            raise AlreadyBuiltError(operation)

    def _ensure_no_injected_session(self, operation: str) -> None:
        if self.transport.session_properties is not None:
            raise SessionAlreadyInjectedError(operation)


def _parse_recipients(addresses: str | Sequence[str], *, field: str) -> list[Address]:
    """Parse every entry before returning, so callers can apply the result atomically."""

    if isinstance(addresses, str):
        raw_items: Iterable[str] = (addresses,)
    elif isinstance(addresses, Sequence):  # pyright: ignore[reportUnnecessaryIsInstance]
        raw_items = addresses
    else:
        raise InvalidAddressError(addresses, "expected a string or a sequence of strings", field=field)
    return [parse_address(item, field=field) for item in raw_items]


def _upsert_header(headers: dict[str, str], name: str, value: str) -> None:
    folded = name.lower()
    for existing in headers:
        if existing.lower() == folded:
            headers[existing] = value
            return
    headers[name] = value
