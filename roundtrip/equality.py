#  -*- coding: utf-8 -*-
"""
Equality contracts checked by the round-trip verifier.

Two comparisons are provided, both returning the list of ``Difference``
found (an empty list meaning equality):

json_differences
    Structural JSON equality. Both texts are parsed; values, key sets and
    nesting must match while key order and formatting are ignored.

field_differences
    Deep field-wise equality. Values are compared by recursively walking
    their fields (DTO properties, dataclass fields, ``__dict__`` and
    ``__slots__`` attributes), never by identity nor by the type's own
    ``__eq__``. Only leaf types (strings, numbers, dates, ...) are compared
    with ``==``.

Numbers in JSON
---------------
By default an integer and a floating-point number are different JSON values
(``1`` differs from ``1.0``), matching the distinction Python's ``json``
module makes when parsing. Pass ``strict_numbers=False`` to compare numbers by
value. Booleans never equal numbers, whatever the mode.
"""

from __future__ import annotations

import dataclasses
import datetime
import json
import math
import re
import uuid

import numpy
import pandas

from collections.abc import Mapping
from enum import Enum
from numbers import Number
from pathlib import PurePath

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, Iterator

from .dto import DTO, get_full_qualified_name


class _Missing:

    def __repr__(self) -> str:
        return '<missing>'


MISSING = _Missing()
"""Placeholder for the side of a difference where a member does not exist"""


@dataclasses.dataclass(frozen=True)
class Difference:
    """
    One point where an actual value departs from the expected one.

    Attributes
    ----------
    path : str
        Location of the value, ``$`` being the root, e.g. ``$.items[0].name``.
    expected : object
        Expected value at ``path`` (``MISSING`` if it should not exist).
    actual : object
        Actual value at ``path`` (``MISSING`` if it does not exist).
    reason : str
        Short description of the mismatch.
    """

    path: str
    expected: Any
    actual: Any
    reason: str

    def __str__(self) -> str:
        return f"{self.path}: {self.reason} (expected {self.expected!r}, actual {self.actual!r})"


_IDENTIFIER = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')


def _child_path(path: str, key: Any) -> str:

    if isinstance(key, str) and _IDENTIFIER.match(key):
        return f"{path}.{key}"

    return f"{path}[{key!r}]"


# ========== ========== ========== ========== ========== structural JSON
def _json_type(value: Any) -> str:

    if value is None:
        return 'null'

    if isinstance(value, bool):
        return 'boolean'

    if isinstance(value, (int, float)):
        return 'number'

    if isinstance(value, str):
        return 'string'

    if isinstance(value, list):
        return 'array'

    return 'object'


def _is_json_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _compare_json(actual: Any,
                  expected: Any,
                  path: str,
                  strict_numbers: bool,
                  differences: list[Difference]) -> None:

    if _json_type(actual) != _json_type(expected):
        reason = f"expected {_json_type(expected)} but was {_json_type(actual)}"
        differences.append(Difference(path, expected, actual, reason))

    elif isinstance(expected, dict):

        for key in expected.keys() - actual.keys():
            differences.append(Difference(_child_path(path, key), expected[key], MISSING, 'missing member'))

        for key in actual.keys() - expected.keys():
            differences.append(Difference(_child_path(path, key), MISSING, actual[key], 'unexpected member'))

        for key in expected:
            if key in actual:
                _compare_json(actual[key], expected[key], _child_path(path, key), strict_numbers, differences)

    elif isinstance(expected, list):

        if len(actual) != len(expected):
            reason = f"expected {len(expected)} items but was {len(actual)}"
            differences.append(Difference(path, expected, actual, reason))

        for idx, (_actual, _expected) in enumerate(zip(actual, expected)):
            _compare_json(_actual, _expected, f"{path}[{idx}]", strict_numbers, differences)

    elif _is_json_number(expected):

        if strict_numbers and type(actual) is not type(expected):
            reason = f"expected {type(expected).__name__} but was {type(actual).__name__}"
            differences.append(Difference(path, expected, actual, reason))

        elif not _numbers_equal(actual, expected):
            differences.append(Difference(path, expected, actual, 'different value'))

    elif actual != expected:
        differences.append(Difference(path, expected, actual, 'different value'))


def _numbers_equal(actual: Any, expected: Any) -> bool:

    if isinstance(actual, float) and isinstance(expected, float):
        if math.isnan(actual) and math.isnan(expected):
            return True

    return actual == expected


def json_differences(actual: str, expected: str, *, strict_numbers: bool = True) -> list[Difference]:
    """
    Compare two JSON texts structurally.

    Parameters
    ----------
    actual : str
        JSON text produced by the code under test.
    expected : str
        Reference JSON text.
    strict_numbers : bool, default True
        If True, integers and floats are different values. If False, numbers
        are compared by value only.

    Returns
    -------
    list[Difference]
        Empty when both texts hold the same JSON value. If either text is not
        valid JSON, a single difference located at ``$`` is returned.

    Examples
    --------
    >>> json_differences('{"name": "a", "id": 1}', '{"id":1,"name":"a"}')
    []
    >>> [d.path for d in json_differences('{"id": 1}', '{"id": 2}')]
    ['$.id']
    """
    try:
        expected_value = json.loads(expected)
    except (TypeError, ValueError) as exc:
        return [Difference('$', expected, actual, f"expected value is not valid JSON: {exc}")]

    try:
        actual_value = json.loads(actual)
    except (TypeError, ValueError) as exc:
        return [Difference('$', expected, actual, f"actual value is not valid JSON: {exc}")]

    differences = []
    _compare_json(actual_value, expected_value, '$', strict_numbers, differences)

    return differences


# ========== ========== ========== ========== ========== deep field-wise
_leaf_types: set[type] = {
    str,
    bytes,
    bytearray,
    Number,
    Enum,
    PurePath,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    datetime.tzinfo,
    uuid.UUID,
    numpy.generic,
    numpy.dtype,
    type,
}


def register_leaf_type(leaf_type: type) -> None:
    """
    Register a type compared with ``==`` instead of field by field.

    Raises
    ------
    TypeError
        If the type is a container or a DTO, whose fields are always walked.
    """
    if issubclass(leaf_type, (list, dict, tuple, set, frozenset, DTO)):
        raise TypeError(f'Cannot register {get_full_qualified_name(leaf_type)} as leaf type')

    _leaf_types.add(leaf_type)


def remove_leaf_type(leaf_type: type) -> None:
    """
    Remove a leaf type. Removing a type that is not registered does nothing.
    """
    _leaf_types.discard(leaf_type)


def is_leaf_type(type_: type) -> bool:
    return issubclass(type_, tuple(_leaf_types))


def _is_nan(value: Any) -> bool:
    return isinstance(value, (float, complex, numpy.inexact)) and bool(numpy.isnan(value))


def _leaves_equal(actual: Any, expected: Any) -> bool:

    if _is_nan(actual) and _is_nan(expected):
        return True

    return bool(actual == expected)


def _slot_names(cls: type) -> Iterator[str]:

    for base in cls.__mro__:
        slots = base.__dict__.get('__slots__', ())

        if isinstance(slots, str):
            slots = (slots,)

        for slot in slots:

            if slot in ('__dict__', '__weakref__'):
                continue

            if slot.startswith('__') and not slot.endswith('__'):
                slot = f"_{base.__name__.lstrip('_')}{slot}"

            yield slot


def _object_fields(obj: Any) -> list[str]:

    fields = list(getattr(obj, '__dict__', {}).keys())

    for slot in _slot_names(type(obj)):
        if slot not in fields and hasattr(obj, slot):
            fields.append(slot)

    return fields


class _FieldComparison:
    """
    Single recursive walk over two object graphs.

    Pairs of objects already under comparison are remembered by identity so
    that reference cycles terminate.
    """

    def __init__(self) -> None:
        self.differences: list[Difference] = []
        self._visited: set[tuple[int, int]] = set()

    def _report(self, path: str, actual: Any, expected: Any, reason: str) -> None:
        self.differences.append(Difference(path, expected, actual, reason))

    def _same_type(self, path: str, actual: Any, expected: Any) -> bool:

        if type(actual) is type(expected):
            return True

        reason = f"expected {get_full_qualified_name(type(expected))} " \
                 f"but was {get_full_qualified_name(type(actual))}"
        self._report(path, actual, expected, reason)

        return False

    def compare(self, actual: Any, expected: Any, path: str) -> None:

        if actual is expected:
            return

        if actual is None or expected is None or actual is MISSING or expected is MISSING:
            self._report(path, actual, expected, 'different value')
            return

        if not self._same_type(path, actual, expected):
            return

        if is_leaf_type(type(expected)):
            if not _leaves_equal(actual, expected):
                self._report(path, actual, expected, 'different value')
            return

        if isinstance(expected, numpy.ndarray):
            self._compare_arrays(actual, expected, path)
            return

        if isinstance(expected, (pandas.Series, pandas.DataFrame, pandas.Index)):
            if not expected.equals(actual):
                self._report(path, actual, expected, 'different value')
            return

        pair = (id(actual), id(expected))

        if pair in self._visited:
            return

        self._visited.add(pair)

        if isinstance(expected, Mapping):
            self._compare_mappings(actual, expected, path)

        elif isinstance(expected, (list, tuple)):
            self._compare_sequences(actual, expected, path)

        elif isinstance(expected, (set, frozenset)):
            if actual != expected:
                self._report(path, actual, expected, 'different elements')

        elif isinstance(expected, DTO):
            for name in type(expected).dto_properties:
                self.compare(getattr(actual, name), getattr(expected, name), _child_path(path, name))

        elif dataclasses.is_dataclass(expected):
            for field in dataclasses.fields(expected):
                name = field.name
                self.compare(getattr(actual, name, MISSING), getattr(expected, name, MISSING),
                             _child_path(path, name))

        else:
            self._compare_objects(actual, expected, path)

    def _compare_arrays(self, actual: numpy.ndarray, expected: numpy.ndarray, path: str) -> None:

        if actual.shape != expected.shape:
            reason = f"expected shape {expected.shape} but was {actual.shape}"
            self._report(path, actual, expected, reason)
            return

        equal_nan = expected.dtype.kind in 'fc' and actual.dtype.kind in 'fc'

        if not numpy.array_equal(actual, expected, equal_nan=equal_nan):
            self._report(path, actual, expected, 'different elements')

    def _compare_mappings(self, actual: Mapping, expected: Mapping, path: str) -> None:

        for key in expected:
            if key not in actual:
                self._report(_child_path(path, key), MISSING, expected[key], 'missing key')

        for key in actual:
            if key not in expected:
                self._report(_child_path(path, key), actual[key], MISSING, 'unexpected key')

        for key in expected:
            if key in actual:
                self.compare(actual[key], expected[key], _child_path(path, key))

    def _compare_sequences(self, actual: list | tuple, expected: list | tuple, path: str) -> None:

        if len(actual) != len(expected):
            reason = f"expected {len(expected)} items but was {len(actual)}"
            self._report(path, actual, expected, reason)

        for idx, (_actual, _expected) in enumerate(zip(actual, expected)):
            self.compare(_actual, _expected, f"{path}[{idx}]")

    def _compare_objects(self, actual: Any, expected: Any, path: str) -> None:

        fields = _object_fields(expected)

        for name in _object_fields(actual):
            if name not in fields:
                fields.append(name)

        if not fields:
            # nothing to walk into
            if not _leaves_equal(actual, expected):
                self._report(path, actual, expected, 'different value')
            return

        for name in fields:
            self.compare(getattr(actual, name, MISSING), getattr(expected, name, MISSING),
                         _child_path(path, name))


def field_differences(actual: Any, expected: Any) -> list[Difference]:
    """
    Compare two values field by field, recursively.

    Parameters
    ----------
    actual : object
        Value produced by the code under test.
    expected : object
        Reference value.

    Returns
    -------
    list[Difference]
        Empty when every reachable field matches.

    Notes
    -----
    Concrete types must match exactly at every level: ``1`` and ``1.0``
    differ, ``True`` and ``1`` differ, a ``tuple`` never equals a ``list``.
    Float ``NaN`` is equal to itself.
    """
    comparison = _FieldComparison()
    comparison.compare(actual, expected, '$')

    return comparison.differences


__all__ = [
    'Difference',
    'MISSING',
    'json_differences',
    'field_differences',
    'register_leaf_type',
    'remove_leaf_type',
    'is_leaf_type',
]
