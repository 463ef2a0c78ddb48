#  -*- coding: utf-8 -*-
"""
Exceptions raised by serializers and by the round-trip verifier.

Serializer errors
-----------------
SerializationError
    An object, or a value it holds, has no JSON representation.
DeserializationError
    A JSON text cannot be turned back into an object.
UnknownTypeError
    The ``"type"`` discriminator of a JSON text names no registered module.

Verification failures
---------------------
VerificationError and its two subclasses are ``AssertionError``: they are
reported by test runners as failures, not errors. They carry the offending
case and the differences found, and render as Rich panels.
"""

from __future__ import annotations

import pandas

from rich.console import Group, RenderableType
from rich.text import Text

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, TYPE_CHECKING

from .display import Displayable

if TYPE_CHECKING:
    from .equality import Difference
    from .verifier import RoundTripCase


# ========== ========== ========== ========== ========== serializer
class SerializationError(TypeError):
    """
    Raised when an object cannot be converted to JSON text.
    """


class DeserializationError(ValueError):
    """
    Raised when a JSON text cannot be converted to an object.
    """


class UnknownTypeError(DeserializationError):
    """
    Raised when the type discriminator of a JSON text is not registered.
    """

    def __init__(self, type_name: str) -> None:
        self.type_name: str = type_name
        super().__init__(f"Unknown type {type_name!r}")


# ========== ========== ========== ========== ========== verifier
class VerificationError(AssertionError, Displayable):
    """
    A round-trip check did not hold for one case.

    Attributes
    ----------
    index : int
        Position of the case in registration order.
    case : RoundTripCase
        The offending case.
    differences : list[Difference]
        Everything that departs from the case's expectation.
    actual : object
        What the serializer produced.
    """

    direction: str = 'Round-trip'

    def __init__(self,
                 index: int,
                 case: RoundTripCase,
                 differences: list[Difference],
                 actual: Any) -> None:

        self.index: int = index
        self.case: RoundTripCase = case
        self.differences: list[Difference] = list(differences)
        self.actual: Any = actual

        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def __reduce__(self) -> tuple:
        return type(self), (self.index, self.case, self.differences, self.actual)

    # ========== ========== ========== ========== ========== protected methods
    def _border_style(self) -> str:
        return self.display_settings.failure_border_style

    def _title(self) -> Text:
        return Text(f"{self.description} failed", style='bold')

    def _content(self) -> RenderableType:

        form = self.format_as_form({
            'Case': str(self.index),
            'Expected JSON': Text(str(self.case.json)),
            'Actual': Text(repr(self.actual)),
        })

        frame = pandas.DataFrame(
            [(d.path, d.reason, repr(d.expected), repr(d.actual)) for d in self.differences],
            columns=['path', 'reason', 'expected', 'actual']
        )

        return Group(form, Text(), self.format_as_table(frame, show_index=False))

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def description(self) -> str:
        """
        str
            Names the check and the object under test.
        """
        return f"{self.direction} test [{self.case.bean!r}]"

    @property
    def message(self) -> str:
        """
        str
            Plain text description followed by one line per difference.
        """
        lines = [self.description]
        lines.extend(f"  {difference}" for difference in self.differences)

        return '\n'.join(lines)


class SerializationMismatch(VerificationError):
    """
    Serializing the case's object did not yield its expected JSON.
    """

    direction = 'Serialization'


class DeserializationMismatch(VerificationError):
    """
    Deserializing the case's JSON did not yield its expected object.
    """

    direction = 'Deserialization'


__all__ = [
    'SerializationError',
    'DeserializationError',
    'UnknownTypeError',
    'VerificationError',
    'SerializationMismatch',
    'DeserializationMismatch',
]
