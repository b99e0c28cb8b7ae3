"""Derivation of SMTP session configuration from builder transport fields.

Purpose
-------
Map the high-level flags a caller sets on a builder to the flat, frozen
:class:`SessionConfig` an SMTP client consumes.

Contents
--------
* :class:`SessionConfig` – immutable session posture, convertible to and from
  ``mail.smtp.*`` properties.
* :func:`derive_session_config` – pure mapping from :class:`TransportSettings`.
* :func:`get_session_config` – entry point taking a builder.

System Role
-----------
Every call recomputes the configuration from the current settings. Nothing is
cached, so two configs obtained at different times never alias each other and
later builder changes are only seen by later calls. Injected session
properties are copied when injected and re-read on each call the same way.
"""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict

from .address import Address, parse_address
from .builder import EmailMessageBuilder, logger
from .errors import MissingHostNameError
from .settings import (
    MAIL_CONNECTION_TIMEOUT,
    MAIL_ENVELOPE_FROM,
    MAIL_HOST,
    MAIL_PORT,
    MAIL_READ_TIMEOUT,
    MAIL_SSL_CHECKSERVERIDENTITY,
    MAIL_SSL_ENABLE,
    MAIL_STARTTLS_ENABLE,
    MAIL_STARTTLS_REQUIRED,
    TransportSettings,
    conf,
    normalise_host_name,
)


class SessionConfig(BaseModel):
    """Frozen transport posture handed to the SMTP collaborator.

    Fields
    ------
    host_name:
        SMTP host, always present.
    port:
        Resolved port; explicit setting or protocol default.
    ssl_on_connect / start_tls_enabled / start_tls_required:
        Encryption posture.
    ssl_check_server_identity:
        Effective hostname verification flag; ``False`` unless SSL or
        STARTTLS is enabled.
    bounce_address:
        Envelope sender, independent of the message ``From``.
    socket_timeout_ms:
        Connection and read timeout; ``None`` leaves the client default.
    """

    host_name: str
    port: int
    ssl_on_connect: bool = False
    start_tls_enabled: bool = False
    start_tls_required: bool = False
    ssl_check_server_identity: bool = False
    bounce_address: Address | None = None
    socket_timeout_ms: int | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def connection_timeout_ms(self) -> int | None:
        return self.socket_timeout_ms

    @property
    def read_timeout_ms(self) -> int | None:
        return self.socket_timeout_ms

    def to_properties(self) -> dict[str, str]:
        """Render the config with SMTP property names for property-keyed transports.

        Optional entries (bounce address, timeouts) are omitted when unset;
        booleans render as ``"true"``/``"false"``.

        Examples
        --------
        >>> SessionConfig(host_name="smtp.example.com", port=25).to_properties()[MAIL_HOST]
        'smtp.example.com'
        """

        properties = {
            MAIL_HOST: self.host_name,
            MAIL_PORT: str(self.port),
            MAIL_SSL_ENABLE: _render_flag(self.ssl_on_connect),
            MAIL_STARTTLS_ENABLE: _render_flag(self.start_tls_enabled),
            MAIL_STARTTLS_REQUIRED: _render_flag(self.start_tls_required),
            MAIL_SSL_CHECKSERVERIDENTITY: _render_flag(self.ssl_check_server_identity),
        }
        if self.bounce_address is not None:
            properties[MAIL_ENVELOPE_FROM] = self.bounce_address.addr_spec
        if self.socket_timeout_ms is not None:
            properties[MAIL_CONNECTION_TIMEOUT] = str(self.socket_timeout_ms)
            properties[MAIL_READ_TIMEOUT] = str(self.socket_timeout_ms)
        return properties

    @classmethod
    def from_properties(cls, properties: Mapping[str, str]) -> SessionConfig:
        """Read a config back from ``mail.smtp.*`` properties.

        Why
            Callers holding an existing session's properties can hand them to
            a builder instead of setting every transport field again.

        What
            Inverse of :meth:`to_properties`. Flags are ``true`` only when the
            value reads ``"true"`` (any case). A missing port resolves against
            :data:`~mail_compose.settings.conf` like the builder does. The
            connection timeout wins over the read timeout when both are given.

        Raises
        ------
        MissingHostNameError
            When ``mail.smtp.host`` is absent or blank.
        InvalidAddressError
            When ``mail.smtp.from`` is not a valid address.
        ValueError
            When the port or a timeout is not an integer.

        Examples
        --------
        >>> SessionConfig.from_properties({MAIL_HOST: "smtp.example.com", MAIL_SSL_ENABLE: "true"}).port
        465
        """

        host_name = normalise_host_name(properties.get(MAIL_HOST))
        if host_name is None:
            raise MissingHostNameError()

        ssl_on_connect = _parse_flag(properties.get(MAIL_SSL_ENABLE))
        start_tls_enabled = _parse_flag(properties.get(MAIL_STARTTLS_ENABLE))

        port = _parse_int(properties, MAIL_PORT)
        if port is None:
            port = conf.ssl_smtp_port if ssl_on_connect else conf.smtp_port

        raw_bounce = properties.get(MAIL_ENVELOPE_FROM)
        bounce_address = None if raw_bounce is None else parse_address(raw_bounce, field="bounce_address")

        timeout = _parse_int(properties, MAIL_CONNECTION_TIMEOUT)
        if timeout is None:
            timeout = _parse_int(properties, MAIL_READ_TIMEOUT)

        return cls(
            host_name=host_name,
            port=port,
            ssl_on_connect=ssl_on_connect,
            start_tls_enabled=start_tls_enabled,
            start_tls_required=_parse_flag(properties.get(MAIL_STARTTLS_REQUIRED)),
            ssl_check_server_identity=(
                _parse_flag(properties.get(MAIL_SSL_CHECKSERVERIDENTITY)) and (ssl_on_connect or start_tls_enabled)
            ),
            bounce_address=bounce_address,
            socket_timeout_ms=timeout if timeout is not None and timeout > 0 else None,
        )


def get_session_config(builder: EmailMessageBuilder) -> SessionConfig:
    """Derive a fresh :class:`SessionConfig` from ``builder``'s transport fields.

    Raises
    ------
    MissingHostNameError
        When neither the builder nor its injected session properties name a
        host.
    """

    return derive_session_config(builder.transport)


def derive_session_config(settings: TransportSettings) -> SessionConfig:
    """Map :class:`TransportSettings` to a :class:`SessionConfig`.

    Why
        Centralises the flag-to-session mapping so defaults are resolved in
        exactly one place.

    What
        Resolves the port against :data:`~mail_compose.settings.conf`
        (SSL-on-connect selects ``ssl_smtp_port``), keeps
        ``ssl_check_server_identity`` only when an encrypted mode is enabled,
        and drops non-positive timeouts. When session properties were
        injected, they are the only source and are read through
        :meth:`SessionConfig.from_properties`, with ``host_name`` filling in
        a missing ``mail.smtp.host``.

    Outputs
    -------
    SessionConfig
        New frozen instance on every call.

    Side Effects
    ------------
    Debug logging only.
    """

    host_name = settings.resolved_host_name()
    if host_name is None:
        raise MissingHostNameError()

    if settings.session_properties is not None:
        session = SessionConfig.from_properties({**settings.session_properties, MAIL_HOST: host_name})
        logger.debug('derived mail session for host "%s" port %s from injected properties', host_name, session.port)
        return session

    if settings.smtp_port is not None:
        port = settings.smtp_port
    elif settings.ssl_on_connect:
        port = conf.ssl_smtp_port
    else:
        port = conf.smtp_port

    encrypted = settings.ssl_on_connect or settings.start_tls_enabled
    if settings.ssl_check_server_identity and not encrypted:
        logger.debug("ssl_check_server_identity ignored: neither SSL-on-connect nor STARTTLS is enabled")

    timeout = settings.socket_timeout_ms if settings.socket_timeout_ms > 0 else None

    session = SessionConfig(
        host_name=host_name,
        port=port,
        ssl_on_connect=settings.ssl_on_connect,
        start_tls_enabled=settings.start_tls_enabled,
        start_tls_required=settings.start_tls_required,
        ssl_check_server_identity=settings.ssl_check_server_identity and encrypted,
        bounce_address=settings.bounce_address,
        socket_timeout_ms=timeout,
    )
    logger.debug('derived mail session for host "%s" port %s', session.host_name, session.port)
    return session


def _render_flag(value: bool) -> str:
    return "true" if value else "false"


def _parse_flag(value: str | None) -> bool:
    return value is not None and value.strip().lower() == "true"


def _parse_int(properties: Mapping[str, str], key: str) -> int | None:
    raw = properties.get(key)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f'{key} must be an integer, got "{raw}"') from exc
