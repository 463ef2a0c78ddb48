#  -*- coding: utf-8 -*-
"""
Test suite for structural JSON equality and deep field-wise equality.
"""

from __future__ import annotations

import pytest

import datetime
import numpy
import pandas

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from roundtrip.dto import DTO, DTOProperty
from roundtrip.equality import (MISSING,
                                Difference,
                                json_differences,
                                field_differences,
                                register_leaf_type,
                                remove_leaf_type,
                                is_leaf_type)


# ========== ========== ========== ========== Test json_differences
class TestJsonDifferences:

    def test_key_order_is_ignored(self) -> None:
        assert json_differences('{"name":"a","id":1}', '{"id":1,"name":"a"}') == []

    def test_whitespace_is_ignored(self) -> None:
        assert json_differences('{\n    "id": [1, 2]\n}', '{"id":[1,2]}') == []

    def test_different_value(self) -> None:
        differences = json_differences('{"id": 1}', '{"id": 2}')

        assert differences == [Difference('$.id', 2, 1, 'different value')]

    def test_missing_and_unexpected_members(self) -> None:
        differences = json_differences('{"id": 1, "extra": true}', '{"id": 1, "name": "a"}')

        assert Difference('$.name', 'a', MISSING, 'missing member') in differences
        assert Difference('$.extra', MISSING, True, 'unexpected member') in differences
        assert len(differences) == 2

    def test_array_order_matters(self) -> None:
        differences = json_differences('[2, 1]', '[1, 2]')

        assert [d.path for d in differences] == ['$[0]', '$[1]']

    def test_array_length(self) -> None:
        differences = json_differences('[1, 2]', '[1, 2, 3]')

        assert len(differences) == 1
        assert differences[0].path == '$'
        assert differences[0].reason == 'expected 3 items but was 2'

    def test_nested_path(self) -> None:
        differences = json_differences('{"a": {"b c": [{"d": 1}]}}', '{"a": {"b c": [{"d": 2}]}}')

        assert [d.path for d in differences] == ["$.a['b c'][0].d"]

    def test_integer_and_float_differ_by_default(self) -> None:
        differences = json_differences('{"id": 1.0}', '{"id": 1}')

        assert len(differences) == 1
        assert differences[0].reason == 'expected int but was float'

    def test_lenient_numbers(self) -> None:
        assert json_differences('{"id": 1.0}', '{"id": 1}', strict_numbers=False) == []
        assert len(json_differences('{"id": 1.5}', '{"id": 1}', strict_numbers=False)) == 1

    def test_booleans_are_not_numbers(self) -> None:
        assert len(json_differences('true', '1')) == 1
        assert len(json_differences('true', '1', strict_numbers=False)) == 1
        assert len(json_differences('0', 'false', strict_numbers=False)) == 1

    def test_null_and_types(self) -> None:
        differences = json_differences('{"id": null}', '{"id": "1"}')

        assert differences[0].reason == 'expected string but was null'

    def test_nan_equals_nan(self) -> None:
        assert json_differences('[NaN]', '[NaN]') == []

    def test_invalid_expected_json(self) -> None:
        differences = json_differences('{"id": 1}', '{"id": ')

        assert len(differences) == 1
        assert differences[0].path == '$'
        assert differences[0].reason.startswith('expected value is not valid JSON')

    def test_invalid_actual_json(self) -> None:
        differences = json_differences('not json', '{"id": 1}')

        assert differences[0].reason.startswith('actual value is not valid JSON')

    def test_actual_not_a_string(self) -> None:
        differences = json_differences({'id': 1}, '{"id": 1}')

        assert differences[0].reason.startswith('actual value is not valid JSON')


# ========== ========== ========== ========== Test field_differences
class Color(Enum):
    RED = 1
    BLUE = 2


@dataclass
class Point:
    x: float
    y: float


class AlwaysEqual:
    """Equality operator that hides every field"""

    def __init__(self, value) -> None:
        self.value = value

    def __eq__(self, other) -> bool:
        return True

    __hash__ = object.__hash__


class Slotted:
    __slots__ = ('value', '__secret')

    def __init__(self, value, secret) -> None:
        self.value = value
        self.__secret = secret


class Node:

    def __init__(self, name) -> None:
        self.name = name
        self.children = []
        self.parent = None


class ItemDTO(DTO):
    label = DTOProperty()
    amount = DTOProperty(default=0)


class TestFieldDifferences:

    def test_equal_leaves(self) -> None:
        assert field_differences(1, 1) == []
        assert field_differences('a', 'a') == []
        assert field_differences(Color.RED, Color.RED) == []
        assert field_differences(Path('/tmp'), Path('/tmp')) == []
        assert field_differences(datetime.date(2020, 1, 1), datetime.date(2020, 1, 1)) == []
        assert field_differences(None, None) == []

    def test_leaf_types_must_match_exactly(self) -> None:
        assert field_differences(1.0, 1)[0].reason == 'expected int but was float'
        assert len(field_differences(True, 1)) == 1
        assert len(field_differences((1, 2), [1, 2])) == 1

    def test_none_against_value(self) -> None:
        assert len(field_differences(None, 1)) == 1
        assert len(field_differences(1, None)) == 1

    def test_nan(self) -> None:
        assert field_differences(float('nan'), float('nan')) == []

    def test_numpy_scalar_nan(self) -> None:
        assert field_differences(numpy.float32('nan'), numpy.float32('nan')) == []
        assert field_differences(Point(numpy.float16('nan'), 1), Point(numpy.float16('nan'), 1)) == []
        assert len(field_differences(numpy.float32('nan'), numpy.float32(1))) == 1

    def test_custom_equality_is_bypassed(self) -> None:
        differences = field_differences(AlwaysEqual(1), AlwaysEqual(2))

        assert differences == [Difference('$.value', 2, 1, 'different value')]

    def test_dataclass(self) -> None:
        assert field_differences(Point(1.0, 2.0), Point(1.0, 2.0)) == []
        assert [d.path for d in field_differences(Point(1.0, 3.0), Point(1.0, 2.0))] == ['$.y']

    def test_dto(self) -> None:
        assert field_differences(ItemDTO(label='a'), ItemDTO(label='a', amount=0)) == []
        assert [d.path for d in field_differences(ItemDTO(label='a'), ItemDTO(label='b'))] == ['$.label']

    def test_slots(self) -> None:
        assert field_differences(Slotted(1, 'x'), Slotted(1, 'x')) == []

        differences = field_differences(Slotted(1, 'x'), Slotted(1, 'y'))
        assert [d.path for d in differences] == ['$._Slotted__secret']

    def test_mappings(self) -> None:
        differences = field_differences({'a': 1, 'c': 3}, {'a': 1, 'b': 2})

        assert Difference('$.b', 2, MISSING, 'missing key') in differences
        assert Difference('$.c', MISSING, 3, 'unexpected key') in differences

    def test_non_string_keys(self) -> None:
        differences = field_differences({1: 'a'}, {1: 'b'})

        assert [d.path for d in differences] == ['$[1]']

    def test_sequences(self) -> None:
        differences = field_differences([Point(1.0, 2.0)], [Point(1.0, 2.0), Point(0.0, 0.0)])

        assert [d.path for d in differences] == ['$']

    def test_sets(self) -> None:
        assert field_differences({1, 2}, {2, 1}) == []
        assert field_differences({1, 2}, {1, 3})[0].reason == 'different elements'

    def test_numpy_arrays(self) -> None:
        assert field_differences(numpy.arange(3), numpy.arange(3)) == []
        assert field_differences(numpy.array([numpy.nan]), numpy.array([numpy.nan])) == []
        assert field_differences(numpy.array(['a']), numpy.array(['a'])) == []
        assert field_differences(numpy.zeros(2), numpy.zeros(3))[0].reason == 'expected shape (3,) but was (2,)'
        assert field_differences(numpy.zeros(3), numpy.ones(3))[0].reason == 'different elements'

    def test_pandas_objects(self) -> None:
        frame = pandas.DataFrame({'a': [1, 2]})

        assert field_differences(frame.copy(), frame) == []
        assert len(field_differences(frame * 2, frame)) == 1

        assert field_differences(pandas.Timestamp('2020-01-01'), pandas.Timestamp('2020-01-01')) == []

    def test_cycles_terminate(self) -> None:
        expected = Node('root')
        expected.children.append(Node('leaf'))
        expected.children[0].parent = expected

        actual = Node('root')
        actual.children.append(Node('leaf'))
        actual.children[0].parent = actual

        assert field_differences(actual, expected) == []

        actual.children[0].name = 'other'

        assert [d.path for d in field_differences(actual, expected)] == ['$.children[0].name']

    def test_different_classes(self) -> None:
        differences = field_differences(Point(1.0, 2.0), ItemDTO(label='a'))

        assert len(differences) == 1
        assert differences[0].path == '$'

    def test_register_leaf_type(self) -> None:

        class Token:
            def __init__(self, value) -> None:
                self.value = value

            def __eq__(self, other) -> bool:
                return True

        assert not is_leaf_type(Token)

        register_leaf_type(Token)

        try:
            assert is_leaf_type(Token)
            assert field_differences(Token(1), Token(2)) == []

        finally:
            remove_leaf_type(Token)

        assert len(field_differences(Token(1), Token(2))) == 1

    def test_containers_cannot_be_leaves(self) -> None:

        with pytest.raises(TypeError):
            register_leaf_type(list)

        with pytest.raises(TypeError):
            register_leaf_type(ItemDTO)

    def test_objects_without_fields(self) -> None:
        marker = object()

        assert field_differences(marker, marker) == []
        assert len(field_differences(object(), object())) == 1
