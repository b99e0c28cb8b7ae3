"""Public package surface for composing messages and deriving SMTP sessions."""

from __future__ import annotations

from .address import Address, parse_address, validate_email_address
from .builder import EmailMessageBuilder, logger
from .errors import (
    AlreadyBuiltError,
    InvalidAddressError,
    InvalidHeaderError,
    MailComposeError,
    MailConfigError,
    MailStateError,
    MailValidationError,
    MissingFromAddressError,
    MissingHostNameError,
    NoRecipientsError,
    SessionAlreadyInjectedError,
)
from .headers import validate_header
from .message import EmailMessage, MessageBody
from .session import SessionConfig, derive_session_config, get_session_config
from .settings import ConfMail, TransportSettings, conf

__all__ = [
    "Address",
    "AlreadyBuiltError",
    "ConfMail",
    "EmailMessage",
    "EmailMessageBuilder",
    "InvalidAddressError",
    "InvalidHeaderError",
    "MailComposeError",
    "MailConfigError",
    "MailStateError",
    "MailValidationError",
    "MessageBody",
    "MissingFromAddressError",
    "MissingHostNameError",
    "NoRecipientsError",
    "SessionAlreadyInjectedError",
    "SessionConfig",
    "TransportSettings",
    "conf",
    "derive_session_config",
    "get_session_config",
    "logger",
    "parse_address",
    "validate_email_address",
    "validate_header",
]
