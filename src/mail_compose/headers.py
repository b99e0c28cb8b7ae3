"""Header name/value checks applied before a header reaches the builder."""

from __future__ import annotations

from .errors import InvalidHeaderError


def validate_header(name: str | None, value: str | None) -> None:
    """Raise :class:`InvalidHeaderError` unless ``name``/``value`` can be stored.

    Why
        A header that slips through here would be rendered verbatim by the
        MIME layer, so bad names and CR/LF in values must stop at the caller.

    Inputs
    ------
    name:
        Header field name. Must be a non-empty string of printable ASCII
        without ``:`` or spaces.
    value:
        Header value. ``""`` is allowed, ``None`` is not.

    Side Effects
    ------------
    None.

    Examples
    --------
    >>> validate_header("X-Mailer", "")
    >>> validate_header("", "value")
    Traceback (most recent call last):
    ...
    mail_compose.errors.InvalidHeaderError: invalid header "": name must not be empty
    """

    if name is None:
        raise InvalidHeaderError(name, "name is missing")
    if not isinstance(name, str):  # pyright: ignore[reportUnnecessaryIsInstance]
        raise InvalidHeaderError(name, "name must be a string")
    if not name:
        raise InvalidHeaderError(name, "name must not be empty")
    if any(not 33 <= ord(character) <= 126 or character == ":" for character in name):
        raise InvalidHeaderError(name, "name contains illegal characters")

    if value is None:
        raise InvalidHeaderError(name, "value is missing")
    if not isinstance(value, str):  # pyright: ignore[reportUnnecessaryIsInstance]
        raise InvalidHeaderError(name, "value must be a string")
    if "\r" in value or "\n" in value:
        raise InvalidHeaderError(name, "value must not contain line breaks")
