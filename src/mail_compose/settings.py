"""Validated configuration models for SMTP transport posture.

Contents
--------
* :class:`ConfMail` – protocol defaults shared by every builder.
* :data:`conf` – module-global :class:`ConfMail` instance.
* :class:`TransportSettings` – per-builder transport fields, validated on
  assignment.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .address import Address


#: SMTP property names used at the boundary with property-keyed transports.
MAIL_HOST = "mail.smtp.host"
MAIL_PORT = "mail.smtp.port"
MAIL_SSL_ENABLE = "mail.smtp.ssl.enable"
MAIL_STARTTLS_ENABLE = "mail.smtp.starttls.enable"
MAIL_STARTTLS_REQUIRED = "mail.smtp.starttls.required"
MAIL_SSL_CHECKSERVERIDENTITY = "mail.smtp.ssl.checkserveridentity"
MAIL_ENVELOPE_FROM = "mail.smtp.from"
MAIL_CONNECTION_TIMEOUT = "mail.smtp.connectiontimeout"
MAIL_READ_TIMEOUT = "mail.smtp.timeout"


class ConfMail(BaseModel):
    """Protocol defaults applied when a builder leaves a transport field unset.

    Fields
    ------
    smtp_port:
        Plaintext / STARTTLS port used when no explicit port is set.
    ssl_smtp_port:
        Port used when SSL-on-connect is enabled and no explicit port is set.
    socket_timeout_ms:
        Initial connection and read timeout for new builders, in milliseconds.
    """

    smtp_port: int = 25
    ssl_smtp_port: int = 465
    socket_timeout_ms: int = 60_000

    model_config = ConfigDict(validate_assignment=True)

    @field_validator("smtp_port", "ssl_smtp_port")
    @classmethod
    def _check_port(cls, value: int) -> int:
        return _validate_port(value)

    @field_validator("socket_timeout_ms")
    @classmethod
    def _check_timeout(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("socket_timeout_ms must be positive")
        return value


#: Global configuration instance reflecting defaults and runtime overrides.
conf = ConfMail()


class TransportSettings(BaseModel):
    """Transport fields a builder carries alongside the message content.

    Why
        The session view must be derivable at any time, independent of
        whether the message was built, so these fields live in their own
        model rather than on the snapshot.

    Fields
    ------
    host_name:
        SMTP host; ``None`` until set. Blank strings clear it.
    smtp_port:
        Explicit port, 1-65535; ``None`` selects the protocol default.
    ssl_on_connect / start_tls_enabled / start_tls_required:
        Encryption posture flags.
    ssl_check_server_identity:
        Hostname verification; only honoured together with SSL or STARTTLS.
    bounce_address:
        Envelope sender for delivery-failure notices.
    socket_timeout_ms:
        Connection and read timeout in milliseconds.
    session_properties:
        Copy of an existing session's ``mail.smtp.*`` properties. While set,
        the session is derived from these alone; their ``mail.smtp.host``
        takes precedence and ``host_name`` is the fallback.
    """

    host_name: str | None = None
    smtp_port: int | None = None
    ssl_on_connect: bool = False
    start_tls_enabled: bool = False
    start_tls_required: bool = False
    ssl_check_server_identity: bool = False
    bounce_address: Address | None = None
    socket_timeout_ms: int = Field(default_factory=lambda: conf.socket_timeout_ms)
    session_properties: dict[str, str] | None = None

    model_config = ConfigDict(validate_assignment=True)

    def resolved_host_name(self) -> str | None:
        """Return the injected session's host when present, else ``host_name``."""

        if self.session_properties is not None:
            injected = normalise_host_name(self.session_properties.get(MAIL_HOST))
            if injected is not None:
                return injected
        return self.host_name

    @field_validator("host_name", mode="before")
    @classmethod
    def _coerce_host_name(cls, value: Any) -> str | None:
        return normalise_host_name(value)

    @field_validator("smtp_port")
    @classmethod
    def _check_port(cls, value: int | None) -> int | None:
        if value is None:
            return None
        return _validate_port(value)


def normalise_host_name(value: Any) -> str | None:
    """Trim whitespace/quotes; map blanks to ``None``; reject inner spaces."""

    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError("host_name must be a string")
    host_name = value.strip().strip('"').strip("'")
    if not host_name:
        return None
    if any(character.isspace() for character in host_name):
        raise ValueError(f'host_name "{host_name}" must not contain whitespace')
    return host_name


def _validate_port(port: int) -> int:
    if not 1 <= port <= 65535:
        raise ValueError(f"port must be 1-65535, got {port}")
    return port
