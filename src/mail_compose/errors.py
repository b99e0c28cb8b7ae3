"""Exception taxonomy raised by the message builder and session factory.

Contents
--------
* :class:`MailValidationError` – malformed caller input (addresses, headers).
* :class:`MailStateError` – builder used after its one-way transition, or
  transport fields set while injected session properties are in force.
* :class:`MailConfigError` – a required field is missing at a terminal call.

Every error carries ``field`` naming the offending field so callers can fix
exactly one thing and retry.
"""

from __future__ import annotations


class MailComposeError(Exception):
    """Root of every error raised by :mod:`mail_compose`."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class MailValidationError(MailComposeError, ValueError):
    """Caller input is malformed; builder state stays untouched."""


class InvalidAddressError(MailValidationError):
    """An address string or display name failed syntax checks."""

    def __init__(self, raw: object, reason: str, *, field: str = "address") -> None:
        super().__init__(f'invalid email address "{raw}" for {field}: {reason}', field=field)
        self.raw = raw
        self.reason = reason


class InvalidHeaderError(MailValidationError):
    """A header name or value cannot be stored or rendered."""

    def __init__(self, name: object, reason: str, *, field: str = "headers") -> None:
        super().__init__(f'invalid header "{name}": {reason}', field=field)
        self.name = name
        self.reason = reason


class MailStateError(MailComposeError, RuntimeError):
    """Programmer misuse of the builder lifecycle."""


class AlreadyBuiltError(MailStateError):
    """The builder was already frozen by a successful ``build()``."""

    def __init__(self, operation: str = "build") -> None:
        super().__init__(f"message was already built, {operation} is not allowed", field="built")
        self.operation = operation


class SessionAlreadyInjectedError(MailStateError):
    """A transport field was set while injected session properties are in force."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            f"session properties were injected, {operation} is not allowed until they are cleared",
            field="session_properties",
        )
        self.operation = operation


class MailConfigError(MailComposeError):
    """A required precondition is absent at ``build()`` or session derivation."""


class MissingFromAddressError(MailConfigError):
    """``build()`` was called before a sender was set."""

    def __init__(self) -> None:
        super().__init__("from address must be set before building the message", field="from")


class NoRecipientsError(MailConfigError):
    """``build()`` was called with empty to, cc and bcc lists."""

    def __init__(self) -> None:
        super().__init__("at least one to, cc or bcc recipient is required", field="recipients")


class MissingHostNameError(MailConfigError):
    """Neither the builder nor injected session properties name an SMTP host."""

    def __init__(self) -> None:
        super().__init__("cannot derive a mail session: no SMTP host name set", field="host_name")
