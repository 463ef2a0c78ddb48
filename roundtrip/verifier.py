#  -*- coding: utf-8 -*-
"""
Round-trip verification of JSON serialization contracts.

A ``JsonSerializationVerifier`` accumulates (expected JSON, expected object)
cases and, on ``verify()``, checks each of them in registration order:

1. serializing the object yields JSON structurally equal to the expected text;
2. deserializing the expected text yields an object deeply equal, field by
   field, to the expected object.

The first failing check raises and the remaining cases are not attempted.
Errors raised by the serializer itself propagate untouched.

Verifiers are immutable: registering a case returns a new verifier, so a
partially built one can be shared as a baseline.

Examples
--------
>>> verifier = JsonSerializationVerifier.from_serializer(serializer) \\
...     .with_case(Person(id=1, name='a'), '{"id": 1, "name": "a"}') \\
...     .bean(Person(id=2, name='b')) \\
...     .json('{"name": "b", "id": 2}')  # doctest: +SKIP
>>> verifier.verify()  # doctest: +SKIP
"""

from __future__ import annotations

import dataclasses
import logging

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, Generic, Iterable, TypeVar

from .equality import json_differences, field_differences
from .errors import SerializationMismatch, DeserializationMismatch
from .serializer import Serializer, DTOModule, JsonGenericSerializer


T = TypeVar('T')
"""Represent the domain type"""


@dataclasses.dataclass(frozen=True)
class RoundTripCase(Generic[T]):
    """
    Expected JSON text paired with the object it stands for.
    """

    json: str
    bean: T


class RequireJson(Generic[T]):
    """
    Second step of a case registration: supplies the expected JSON.

    Returned by ``JsonSerializationVerifier.bean``.
    """

    def __init__(self, verifier: JsonSerializationVerifier[T], bean: T) -> None:
        self._verifier = verifier
        self._bean = bean

    def json(self, json: str) -> JsonSerializationVerifier[T]:
        return self._verifier.with_case(self._bean, json)


class JsonSerializationVerifier(Generic[T]):
    """
    Immutable builder of round-trip cases, bound to a serializer.

    Parameters
    ----------
    serializer : Serializer
        Fully configured serializer. Shared, never modified.
    cases : iterable of RoundTripCase, optional
        Cases to start from.
    strict_numbers : bool, default True
        If True, the forward check treats integers and floats as different
        JSON values (``1`` vs ``1.0``). If False, numbers are compared by
        value.

    Notes
    -----
    Prefer the ``from_serializer`` and ``dto_module`` factories to calling
    the constructor.
    """

    # ========== ========== ========== ========== ========== special methods
    def __init__(self,
                 serializer: Serializer[T],
                 cases: Iterable[RoundTripCase[T]] = (),
                 *,
                 strict_numbers: bool = True) -> None:

        self._logger = logging.getLogger("roundtrip.verifier")

        self._serializer: Serializer[T] = serializer
        self._cases: tuple[RoundTripCase[T], ...] = tuple(cases)
        self._strict_numbers: bool = strict_numbers

    def __len__(self) -> int:
        return len(self._cases)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(serializer={self._serializer!r}, cases={len(self._cases)})"

    # ========== ========== ========== ========== ========== protected methods
    def _verify_case(self, index: int, case: RoundTripCase[T]) -> None:

        self._logger.debug(f"Serialization test #{index} [{case.bean!r}]")

        serialized = self._serializer.serialize(case.bean)
        differences = json_differences(serialized, case.json, strict_numbers=self._strict_numbers)

        if differences:
            self._logger.warning(f"Serialization test #{index} failed with {len(differences)} differences")
            raise SerializationMismatch(index, case, differences, serialized)

        self._logger.debug(f"Deserialization test #{index} [{case.bean!r}]")

        deserialized = self._serializer.deserialize(case.json)
        differences = field_differences(deserialized, case.bean)

        if differences:
            self._logger.warning(f"Deserialization test #{index} failed with {len(differences)} differences")
            raise DeserializationMismatch(index, case, differences, deserialized)

    # ========== ========== ========== ========== ========== public methods
    @classmethod
    def from_serializer(cls,
                        serializer: Serializer[T],
                        *,
                        strict_numbers: bool = True) -> JsonSerializationVerifier[T]:
        """
        Create a verifier without cases bound to a configured serializer.

        Raises
        ------
        TypeError
            If serializer does not provide ``serialize`` and ``deserialize``.
        """
        if not isinstance(serializer, Serializer):
            raise TypeError(f"Expected a serializer, given {type(serializer).__name__}")

        return cls(serializer, strict_numbers=strict_numbers)

    @classmethod
    def dto_module(cls, module: DTOModule, *, strict_numbers: bool = True) -> JsonSerializationVerifier:
        """
        Create a verifier for a single DTO module, without nested types.
        """
        serializer = JsonGenericSerializer.for_modules(module).without_nested_type()

        return cls.from_serializer(serializer, strict_numbers=strict_numbers)

    def bean(self, bean: T) -> RequireJson[T]:
        """
        Start registering a case; complete it with ``.json(text)``.
        """
        return RequireJson(self, bean)

    def with_case(self, bean: T, json: str) -> JsonSerializationVerifier[T]:
        """
        Return a new verifier with one more case. This verifier is unchanged.

        The JSON text is not parsed until ``verify()``.
        """
        return type(self)(self._serializer,
                          (*self._cases, RoundTripCase(json, bean)),
                          strict_numbers=self._strict_numbers)

    def verify(self) -> None:
        """
        Run the forward and backward checks of every case, in order.

        Raises
        ------
        SerializationMismatch
            If serializing a case's object does not yield its JSON.
        DeserializationMismatch
            If deserializing a case's JSON does not yield its object.
        Exception
            Whatever the serializer raises, unchanged.
        """
        for index, case in enumerate(self._cases):
            self._verify_case(index, case)

        self._logger.info(f"Verified {len(self._cases)} round-trip cases")

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def serializer(self) -> Serializer[T]:
        return self._serializer

    @property
    def cases(self) -> tuple[RoundTripCase[T], ...]:
        """
        tuple[RoundTripCase, ...]
            Registered cases, in verification order.
        """
        return self._cases

    @property
    def strict_numbers(self) -> bool:
        return self._strict_numbers


__all__ = [
    'RoundTripCase',
    'RequireJson',
    'JsonSerializationVerifier',
]
