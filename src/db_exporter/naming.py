"""
Naming conventions used when turning table and column names into identifiers.
"""

from __future__ import annotations

import keyword
import re

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_SEPARATORS = re.compile(r"[\s\-]+")
_NON_WORD = re.compile(r"\W")


def snake_case(value: str) -> str:
    """
    Convert an identifier to snake_case.

    ``UserProfile`` -> ``user_profile``, ``HTTPStatus`` -> ``http_status``.
    Already snake-cased input is returned unchanged.
    """
    value = _SEPARATORS.sub("_", value.strip())
    value = _CAMEL_BOUNDARY.sub("_", value)
    return re.sub(r"_+", "_", value).lower()


def studly_case(value: str) -> str:
    """Convert an identifier to StudlyCase: ``user_profiles`` -> ``UserProfiles``."""
    words = re.split(r"[_\s\-]+", value)
    return "".join(word[:1].upper() + word[1:] for word in words if word)


def strip_prefix(value: str, prefix: str) -> str:
    """Remove a leading prefix, leaving the value alone when it does not start with it."""
    if prefix and value.startswith(prefix):
        return value[len(prefix):]
    return value


def guess_method_name(column: str) -> str:
    """Relation method name for a foreign key column: ``author_id`` -> ``author``."""
    name = snake_case(column)
    if name.endswith("_id") and len(name) > len("_id"):
        return name[:-len("_id")]
    return name


def python_identifier(name: str) -> str:
    """
    Make a name usable as a Python identifier.

    Keywords get a trailing underscore (``class`` -> ``class_``); names that
    cannot start an identifier get a leading one (``2023_logs`` -> ``_2023_logs``).
    Valid names are returned unchanged.
    """
    if keyword.iskeyword(name):
        return f"{name}_"
    if name.isidentifier():
        return name
    name = _NON_WORD.sub("_", name)
    if not name.isidentifier():
        name = f"_{name}"
    return name
