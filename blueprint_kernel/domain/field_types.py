"""
Field type registry (``blueprint_kernel.domain.field_types``).

Responsibility
--------------
Closed enumeration of the field kinds a blueprint may declare and the value
domain each kind accepts.  Field values are a tagged union (``TextValue`` |
``FlagValue``) so that a checkbox slot can never hold a string and a text
slot can never hold a boolean.

Architecture position
---------------------
**Kernel domain layer** -- leaf module.  ZERO I/O, no kernel imports other
than ``exceptions``.

Invariants enforced
-------------------
* ``text`` / ``date`` / ``signature`` hold strings.  Dates are ISO calendar
  date strings and signatures are a typed name; neither is format-checked.
* ``checkbox`` holds booleans.
* Adding a kind means extending ``FieldType`` and ``FIELD_VALUE_DOMAINS``
  together (plus the renderer, which lives outside this package).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union

from blueprint_kernel.exceptions import FieldValueTypeError, UnknownFieldTypeError


class FieldType(str, Enum):
    """Kinds of input slot a blueprint can place on its canvas."""

    TEXT = "text"
    DATE = "date"
    SIGNATURE = "signature"
    CHECKBOX = "checkbox"


class ValueDomain(str, Enum):
    """Shape of the value a slot accepts."""

    TEXT = "text"
    FLAG = "flag"


FIELD_VALUE_DOMAINS: dict[FieldType, ValueDomain] = {
    FieldType.TEXT: ValueDomain.TEXT,
    FieldType.DATE: ValueDomain.TEXT,
    FieldType.SIGNATURE: ValueDomain.TEXT,
    FieldType.CHECKBOX: ValueDomain.FLAG,
}


@dataclass(frozen=True)
class TextValue:
    """Value of a text, date or signature slot."""

    domain: ClassVar[ValueDomain] = ValueDomain.TEXT

    text: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.text, str):
            raise FieldValueTypeError("string", type(self.text).__name__)

    @property
    def raw(self) -> str:
        return self.text

    @property
    def is_present(self) -> bool:
        return self.text.strip() != ""


@dataclass(frozen=True)
class FlagValue:
    """Value of a checkbox slot."""

    domain: ClassVar[ValueDomain] = ValueDomain.FLAG

    checked: bool = False

    def __post_init__(self) -> None:
        # bool is checked by identity: ints must not sneak in as flags
        if type(self.checked) is not bool:
            raise FieldValueTypeError("boolean", type(self.checked).__name__)

    @property
    def raw(self) -> bool:
        return self.checked

    @property
    def is_present(self) -> bool:
        return self.checked


FieldValue = Union[TextValue, FlagValue]


def coerce_field_type(raw: FieldType | str) -> FieldType:
    """Resolve a field kind from its enum member or wire name."""
    if isinstance(raw, FieldType):
        return raw
    try:
        return FieldType(raw)
    except ValueError:
        raise UnknownFieldTypeError(str(raw)) from None


def value_domain(field_type: FieldType | str) -> ValueDomain:
    return FIELD_VALUE_DOMAINS[coerce_field_type(field_type)]


def default_value(field_type: FieldType | str) -> FieldValue:
    """Initial value of a freshly created contract slot."""
    if value_domain(field_type) is ValueDomain.FLAG:
        return FlagValue(False)
    return TextValue("")


def wrap_value(raw: object, field_id: str | None = None) -> FieldValue:
    """
    Tag a wire value (``str`` or ``bool``) with its domain.

    Raises:
        FieldValueTypeError: for anything that is neither a string nor a bool.
    """
    if isinstance(raw, (TextValue, FlagValue)):
        return raw
    if type(raw) is bool:
        return FlagValue(raw)
    if isinstance(raw, str):
        return TextValue(raw)
    raise FieldValueTypeError("string or boolean", type(raw).__name__, field_id)
