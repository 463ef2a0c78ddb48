#  -*- coding: utf-8 -*-
"""
Descriptor-driven data transfer objects.

This module provides the JSON-shaped side of a serialization contract: a
``DTOProperty`` descriptor declaring which attributes travel on the wire, and a
``DTO`` base class converting instances to and from JSON-ready trees.

Serialized representation
-------------------------
``DTO.serialize`` produces a tree composed only of:

- ``None``, ``bool``, ``int``, ``float`` and ``str``
- lists (tuples and numpy arrays are serialized as ``list``)
- dictionaries with string keys
- ``DTO`` instances serialized as dictionaries keyed by each property's
  ``key``

When a type map is given, DTO instances whose class appears in it are tagged
with a ``"type"`` discriminator:

    {
        "type": "<type name>",
        "<property_key_1>": <serialized_value>,
        ...
    }

``DTO.deserialize`` walks such a tree back, rebuilding tagged dictionaries
into the DTO class registered under the discriminator. Untagged dictionaries
stay dictionaries.
"""

from __future__ import annotations

import numpy

from abc import ABCMeta

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import TypeVar, Callable, Any, TypeAlias, Self, Type, Mapping


T = TypeVar('T')
"""Represent the type of the property"""

Getter: TypeAlias = Callable[[object], T]
Setter: TypeAlias = Callable[[object, Any], None]
Parser: TypeAlias = Callable[[object, Any], T]

TYPE_KEY: str = 'type'
"""Key holding the type discriminator of tagged DTOs"""


class DTOProperty:
    """
    Descriptor representing an attribute that travels on the wire.

    Parameters
    ----------
    fget : callable, optional
        Getter with signature ``fget(instance) -> value``. If omitted, a default
        getter is generated that reads ``self.private_name``.
    fset : callable, optional
        Setter with signature ``fset(instance, value)``. If omitted, a default
        setter is generated that writes to ``self.private_name``.
    default : object or callable, optional
        Default value returned when the stored value is missing or None. If a
        callable, must have signature ``default(instance) -> value``.
    parser : callable, optional
        Parser invoked before assignment. Signature:
        ``parser(instance, raw_value) -> parsed_value``.
    key : str, optional
        Name of the JSON member holding the value. Defaults to the attribute
        name.
    doc : str, optional
        Explicit docstring. If omitted and ``fget`` is provided, uses the
        getter's docstring.

    Notes
    -----
    As with ``property``, ``None`` means "unset": reading an unset property
    returns the default, and assigning ``None`` stores the default.
    """

    # ========== ========== ========== ========== ========== special methods
    def __init__(self,
                 fget: Getter | None = None,
                 fset: Setter | None = None,
                 *,
                 default: T | Getter | None = None,
                 parser: Parser | None = None,
                 key: str | None = None,
                 doc: str | None = None) -> None:

        self.fget: Getter | None = fget
        self.fset: Setter | None = fset

        self._default: T | Getter | None = default
        self._parser: Parser | None = parser
        self._key: str | None = key

        self.__doc__: str | None = fget.__doc__ if doc is None and fget is not None else doc

    def __set_name__(self, owner: type, name: str) -> None:

        self.name: str = name
        self.owner: type = owner
        self.private_name: str = f"_dto_property__{name}"

        if self._key is None:
            self._key = name

        if self.fget is None:
            self.fget = lambda obj: obj.__getattribute__(self.private_name)

        if self.fset is None:
            self.fset = lambda obj, value: setattr(obj, self.private_name, value)

    def __get__(self, instance: object | None, owner: type) -> T | Self:

        if instance is None:
            return self

        try:
            value = self.fget(instance)
        except AttributeError:
            value = None

        if value is None:
            value = self._resolve_default(instance)

            if value is not None:
                self.fset(instance, value)

        return value

    def __set__(self, instance: object, value: Any) -> None:

        if value is None:
            value = self._resolve_default(instance)

        if self._parser is not None:
            value = self._parser(instance, value)

        self.fset(instance, value)

    # ========== ========== ========== ========== ========== protected methods
    def _resolve_default(self, instance: object) -> Any:

        if callable(self._default):
            return self._default(instance)

        return self._default

    def _replace(self, **changes: Any) -> Self:

        options = {
            'default': self._default,
            'parser': self._parser,
            'key': self._key,
            'doc': self.__doc__,
        }
        options.update(changes)

        return type(self)(self.fget, self.fset, **options)

    # ========== ========== ========== ========== ========== public methods
    def default(self, func: Getter) -> Self:
        """
        Create a new DTOProperty with a replaced default factory.

        Parameters
        ----------
        func : callable
            Default factory with signature ``func(instance) -> value``.
        """
        return self._replace(default=func)

    def parser(self, func: Parser) -> Self:
        """
        Create a new DTOProperty with a replaced parser.

        Parameters
        ----------
        func : callable
            Parser with signature ``parser(instance, raw_value) -> parsed``.
        """
        return self._replace(parser=func)

    @property
    def key(self) -> str | None:
        """
        str
            JSON member name of the property.
        """
        return self._key


# ========== ========== ========== ========== ========== ==========
def get_full_qualified_name(cls: type) -> str:
    """
    Return ``"<module>.<qualname>"``, or just the qualname for builtins.
    """
    module = cls.__module__

    if module is None or module == 'builtins':
        return cls.__qualname__

    return f"{module}.{cls.__qualname__}"


def check_types(obj: Any,
                types: type | tuple[type, ...],
                can_be_none: bool = False,
                raise_error: bool = True) -> bool:
    """
    Check whether an object is an instance of expected types.

    Parameters
    ----------
    obj : object
        Value to test.
    types : type or tuple of type
        Expected type(s).
    can_be_none : bool, default False
        If True, ``None`` is accepted as valid.
    raise_error : bool, default True
        If True, raises TypeError when the check fails.

    Returns
    -------
    bool

    Raises
    ------
    TypeError
        If ``raise_error`` is True and the check fails.

    Examples
    --------
    >>> check_types(1, int)
    True
    >>> check_types("x", int, raise_error=False)
    False
    """
    if can_be_none:
        if isinstance(types, tuple):
            types = (*types, None.__class__)
        else:
            types = (types, None.__class__)

    result = isinstance(obj, types)

    if not result and raise_error:

        if isinstance(types, tuple):
            cls_names = ', '.join(get_full_qualified_name(cls) for cls in types)
        else:
            cls_names = get_full_qualified_name(types)

        error_msg = f"Expected instance of one of the following classes: {cls_names}. " \
                    f"Given {get_full_qualified_name(type(obj))} instead"
        raise TypeError(error_msg)

    return result


class DTOMetatype(ABCMeta):
    """
    Metaclass collecting ``DTOProperty`` descriptors across the MRO.

    Properties are gathered from the most basic class down to the concrete
    one, so that a subclass redefining a property overrides its base, and the
    declaration order of the base classes comes first.
    """

    def __new__(mcs,
                name: str,
                bases: tuple[type, ...],
                namespace: dict[str, Any],
                **kwargs: Any) -> Type[DTO]:

        cls = super().__new__(mcs, name, bases, namespace, **kwargs)

        cls._dto_properties = {}

        for base in reversed(cls.__mro__):

            if base is object:
                continue

            for attr_name, attr_value in base.__dict__.items():

                if isinstance(attr_value, DTOProperty):
                    cls._dto_properties[attr_name] = attr_value

        keys = [prop.key for prop in cls._dto_properties.values()]
        duplicated = {key for key in keys if keys.count(key) > 1}

        if duplicated:
            raise ValueError(f"Class {name} declares the JSON keys {sorted(duplicated)} more than once")

        return cls

    @property
    def dto_properties(cls) -> dict[str, DTOProperty]:
        """
        dict[str, DTOProperty]
            Copy of the property schema of this class, inherited properties
            included.
        """
        return {**cls._dto_properties}

    @property
    def dto_keys(cls) -> list[str]:
        """
        list[str]
            JSON member names of the property schema.
        """
        return [prop.key for prop in cls._dto_properties.values()]


class DTO(metaclass=DTOMetatype):
    """
    Base class for JSON data transfer objects.

    Construction
    ------------
    DTO(**kwargs)
        Keys must be property names of the class schema. Missing ones take
        their default, extra ones raise ValueError.

    Equality
    --------
    ``a == b`` holds for objects of the same type whose properties are all
    equal. Property values supporting NumPy broadcasting are compared with
    ``numpy.all``.

    Examples
    --------
    >>> class PersonDTO(DTO):
    ...     name = DTOProperty()
    ...     birth_year = DTOProperty(key='birthYear')
    ...
    >>> PersonDTO(name='Ada', birth_year=1815).to_data()
    {'name': 'Ada', 'birthYear': 1815}
    """

    # ========== ========== ========== ========== ========== special methods
    def __init__(self, **kwargs: Any) -> None:

        unknown = kwargs.keys() - type(self)._dto_properties.keys()

        if unknown:
            error = f"There is no signature with the keys {sorted(unknown)}"
            raise ValueError(error)

        for name in type(self)._dto_properties:
            setattr(self, name, kwargs.get(name))

    def __eq__(self, other: Any) -> bool:

        if type(other) is not type(self):
            return NotImplemented

        for name in type(self)._dto_properties:

            if not numpy.all(getattr(other, name) == getattr(self, name)):
                return False

        return True

    def __repr__(self) -> str:
        values = ', '.join(f"{name}={getattr(self, name)!r}" for name in type(self)._dto_properties)
        return f"{type(self).__name__}({values})"

    # ========== ========== ========== ========== ========== public methods
    @staticmethod
    def serialize(obj: Any, type_names: Mapping[type, str] | None = None) -> Any:
        """
        Serialize an object into a JSON-ready tree.

        Parameters
        ----------
        obj : object
            Object to serialize.
        type_names : mapping, optional
            DTO classes whose instances must carry a ``"type"``
            discriminator, mapped to the discriminator value.

        Returns
        -------
        object
            Tree made of dicts, lists and JSON scalars.

        Raises
        ------
        TypeError
            If no JSON representation exists for a value of the tree.
        """
        if obj is None or isinstance(obj, (str, bool, int, float)):
            return obj

        if isinstance(obj, numpy.generic):
            return obj.item()

        if isinstance(obj, (tuple, list, numpy.ndarray)):
            return [DTO.serialize(o, type_names) for o in obj]

        if isinstance(obj, dict):

            for key in obj:
                check_types(key, str)

            return {k: DTO.serialize(v, type_names) for k, v in obj.items()}

        if isinstance(obj, DTO):

            cls = type(obj)
            data = {}

            if type_names is not None and cls in type_names:
                data[TYPE_KEY] = type_names[cls]

            for name, prop in cls._dto_properties.items():
                data[prop.key] = DTO.serialize(getattr(obj, name), type_names)

            return data

        error = f"No serialisation process is implemented for object of " \
                f"type {type(obj).__name__}."
        raise TypeError(error)

    @staticmethod
    def deserialize(data: Any, dto_types: Mapping[str, Type[DTO]] | None = None) -> Any:
        """
        Rebuild a tree produced by ``serialize``.

        Parameters
        ----------
        data : object
            JSON-ready tree.
        dto_types : mapping, optional
            Discriminator values mapped to the DTO class to rebuild. Tagged
            dictionaries whose discriminator is not in the mapping stay
            dictionaries.

        Returns
        -------
        object
        """
        if isinstance(data, list):
            return [DTO.deserialize(d, dto_types) for d in data]

        if isinstance(data, dict):
            type_name = data.get(TYPE_KEY)

            if dto_types is not None and isinstance(type_name, str) and type_name in dto_types:
                payload = {k: v for k, v in data.items() if k != TYPE_KEY}
                return dto_types[type_name].from_data(payload, dto_types)

            return {k: DTO.deserialize(v, dto_types) for k, v in data.items()}

        return data

    @classmethod
    def from_data(cls, data: dict[str, Any], dto_types: Mapping[str, Type[DTO]] | None = None) -> Self:
        """
        Build an instance from its JSON-ready dictionary.

        Parameters
        ----------
        data : dict
            Mapping keyed by property keys. It is not modified.
        dto_types : mapping, optional
            Forwarded to ``deserialize`` for nested values.

        Raises
        ------
        TypeError
            If data is not a dict.
        ValueError
            If data holds keys outside the class schema.
        """
        check_types(data, dict)

        data = dict(data)
        kwargs = {}

        for name, prop in cls._dto_properties.items():
            kwargs[name] = DTO.deserialize(data.pop(prop.key, None), dto_types)

        if data:
            error = f"There is no signature with the keys {sorted(data.keys())}"
            raise ValueError(error)

        return cls(**kwargs)

    def to_data(self, type_names: Mapping[type, str] | None = None) -> dict[str, Any]:
        """
        Return the JSON-ready dictionary of this instance.
        """
        return DTO.serialize(self, type_names)


__all__ = [
    'DTOProperty',
    'DTO',
    'DTOMetatype',
    'TYPE_KEY',
    'check_types',
    'get_full_qualified_name',
]
