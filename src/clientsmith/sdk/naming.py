"""Naming and literal helpers for generated Python source.

Operation and group names in definition files follow whatever convention the
API author used (``listPets``, ``pet-store``, ``Order Items``). The generated
client needs them as module names, variable names and class names, so every
name goes through the converters below.

Literal helpers render Python values (strings, string lists, dicts of code
fragments) as source text.
"""

from __future__ import annotations

import json
import keyword
import re
from typing import Any, Callable, Hashable, Iterable, Mapping, TypeVar

T = TypeVar("T")

# Matches any character that is not alphanumeric or underscore.
_INVALID_IDENT_RE = re.compile(r"[^a-zA-Z0-9_]")


def _words(name: str) -> list[str]:
    """Split *name* into lowercase words at case and separator boundaries."""
    # e.g. "petId" -> "pet_Id", "XMLParser" -> "XML_Parser"
    result = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    result = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", result)
    result = _INVALID_IDENT_RE.sub("_", result.lower())
    return [word for word in result.split("_") if word]


def _identifier(result: str, fallback: str) -> str:
    if not result:
        result = fallback
    if result[0].isdigit():
        result = f"_{result}"
    if keyword.iskeyword(result):
        result = f"{result}_"
    return result


def snake_case(name: str) -> str:
    """Convert *name* to a snake_case Python identifier.

    Example::

        >>> snake_case("listPets schema")
        'list_pets_schema'
        >>> snake_case("class")
        'class_'
    """
    return _identifier("_".join(_words(name)), "name")


def pascal_case(name: str) -> str:
    """Convert *name* to a PascalCase class name (``"list pets"`` -> ``"ListPets"``)."""
    return _identifier("".join(word.capitalize() for word in _words(name)), "Name")


def py_literal(value: Any) -> str:
    """Render a string, number, bool, ``None`` or a list of strings as Python source."""
    if value is None or isinstance(value, bool):
        return repr(value)
    return json.dumps(value, ensure_ascii=False)


def to_lit_object(fields: Mapping[str, str]) -> str:
    """Render a dict literal whose values are already source code.

    Example::

        >>> to_lit_object({"json": "CreatePet", "urlencoded": "CreatePetForm"})
        '{"json": CreatePet, "urlencoded": CreatePetForm}'
    """
    entries = ", ".join(f"{py_literal(key)}: {code}" for key, code in fields.items())
    return "{" + entries + "}"


def remove_duplicates(
    items: Iterable[T], key: Callable[[T], Hashable] = lambda item: item
) -> list[T]:
    """Return *items* without duplicates, keeping the first occurrence order."""
    seen: set[Hashable] = set()
    result: list[T] = []
    for item in items:
        marker = key(item)
        if marker in seen:
            continue
        seen.add(marker)
        result.append(item)
    return result
