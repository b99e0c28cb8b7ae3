"""Immutable message snapshot handed to the mail-transport collaborator.

Contents
--------
* :class:`MessageBody` – tagged body variant (``plain`` or ``html``).
* :class:`EmailMessage` – frozen copy of the builder produced by ``build()``.

System Role
-----------
The snapshot owns nothing mutable and keeps no reference to its builder, so
it can be read by any number of consumers after ``build()``. MIME rendering is
limited to :meth:`EmailMessage.to_mime`, which delegates encoding to the
standard-library ``email`` package.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from email.message import EmailMessage as MIMEMessage
from email.utils import format_datetime, formatdate
from types import MappingProxyType
from typing import Literal

from .address import Address


BodySubtype = Literal["plain", "html"]


@dataclass(frozen=True)
class MessageBody:
    """Single body part; ``subtype`` selects ``text/plain`` or ``text/html``."""

    content: str
    subtype: BodySubtype = "plain"


@dataclass(frozen=True)
class EmailMessage:
    """Transport-ready snapshot of a built message.

    Fields
    ------
    from_address:
        Visible sender.
    to / cc / bcc / reply_to:
        Recipient tuples in the order they were added, duplicates included.
    headers:
        Read-only mapping of custom headers in first-insertion order.
    subject:
        Subject line; ``""`` when the builder never set one.
    sent_date:
        Date exactly as set on the builder, ``None`` when unset.
    body:
        Optional body part.
    """

    from_address: Address
    to: tuple[Address, ...] = ()
    cc: tuple[Address, ...] = ()
    bcc: tuple[Address, ...] = ()
    reply_to: tuple[Address, ...] = ()
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    subject: str = ""
    sent_date: datetime | None = None
    body: MessageBody | None = None
    built: bool = field(default=True, init=False)

    def envelope_recipients(self) -> tuple[str, ...]:
        """Return every to, cc and bcc addr-spec, in that order."""

        return tuple(address.addr_spec for address in (*self.to, *self.cc, *self.bcc))

    def to_mime(self) -> MIMEMessage:
        """Render the snapshot into a standard-library MIME message.

        Why
            The transport collaborator speaks ``email.message.EmailMessage``;
            this is the only place builder fields turn into header text.

        What
            Sets From, To, Cc, Reply-To, Subject and Date, then the custom
            headers (replacing a standard header of the same name), then the
            body part. Bcc recipients are left to the SMTP envelope.

        Outputs
        -------
        email.message.EmailMessage
            Message using ``email.policy.default``.

        Side Effects
        ------------
        None.
        """

        message = MIMEMessage()
        message["From"] = self.from_address.to_header_address()
        if self.to:
            message["To"] = tuple(address.to_header_address() for address in self.to)
        if self.cc:
            message["Cc"] = tuple(address.to_header_address() for address in self.cc)
        if self.reply_to:
            message["Reply-To"] = tuple(address.to_header_address() for address in self.reply_to)
        message["Subject"] = self.subject
        if self.sent_date is not None:
            message["Date"] = format_datetime(self.sent_date)
        else:
            message["Date"] = formatdate(localtime=True)

        for name, value in self.headers.items():
            if name in message:
                message.replace_header(name, value)
            else:
                message[name] = value

        if self.body is not None:
            message.set_content(self.body.content, subtype=self.body.subtype)
        return message
