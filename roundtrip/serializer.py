#  -*- coding: utf-8 -*-
"""
Serializer capability and a generic DTO-module based JSON serializer.

Any object with ``serialize(obj) -> str`` and ``deserialize(text) -> obj``
satisfies the ``Serializer`` protocol consumed by the verifier.

``JsonGenericSerializer`` is such a serializer built from ``DTOModule``
declarations. Each module binds a domain type to a ``DTO`` class and a type
name; the JSON text of an object is the JSON form of its DTO tagged with that
name:

    {"type": "<type name>", "<dto key>": <value>, ...}

Polymorphic DTOs nested inside another DTO are tagged the same way when their
modules are registered as nested type modules.
"""

from __future__ import annotations

import dataclasses
import json
import logging

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, Callable, Generic, Iterable, Protocol, Type, TypeVar, runtime_checkable

from .dto import DTO, TYPE_KEY, check_types, get_full_qualified_name
from .errors import SerializationError, DeserializationError, UnknownTypeError


T = TypeVar('T')
"""Represent the domain type"""

U = TypeVar('U', bound=DTO)
"""Represent the DTO type"""


@runtime_checkable
class Serializer(Protocol[T]):
    """
    Converts domain objects to JSON text and back.

    ``serialize`` need not be byte-for-byte stable (key order may vary) but
    must produce structurally equivalent text for equal inputs.
    ``deserialize`` raises an error for malformed or unrecognized input
    rather than returning a partial object.
    """

    def serialize(self, obj: T) -> str:
        ...

    def deserialize(self, text: str) -> T:
        ...


@dataclasses.dataclass(frozen=True)
class DTOModule(Generic[T, U]):
    """
    Binds a domain type to its DTO and the name tagging it in JSON.

    Attributes
    ----------
    domain_type : type
        Class of the domain objects handled by the module.
    dto_type : type
        ``DTO`` subclass carrying the JSON shape. It must not declare a
        property whose key is ``"type"``.
    type_name : str
        Value of the ``"type"`` discriminator.
    to_dto : callable
        ``to_dto(domain_object) -> dto``.
    to_domain_object : callable
        ``to_domain_object(dto) -> domain_object``.

    Examples
    --------
    >>> module = DTOModule(
    ...     domain_type=Quota,
    ...     dto_type=QuotaDTO,
    ...     type_name='quota',
    ...     to_dto=lambda quota: QuotaDTO(limit=quota.limit),
    ...     to_domain_object=lambda dto: Quota(dto.limit),
    ... )  # doctest: +SKIP
    """

    domain_type: type
    dto_type: Type[DTO]
    type_name: str
    to_dto: Callable[[Any], DTO]
    to_domain_object: Callable[[DTO], Any]

    def __post_init__(self) -> None:

        check_types(self.domain_type, type)
        check_types(self.dto_type, type)
        check_types(self.type_name, str)

        if not issubclass(self.dto_type, DTO):
            raise TypeError(f"{get_full_qualified_name(self.dto_type)} is not a DTO")

        if not self.type_name:
            raise ValueError("type_name cannot be empty")

        if TYPE_KEY in self.dto_type.dto_keys:
            raise ValueError(f"{get_full_qualified_name(self.dto_type)} declares the reserved key {TYPE_KEY!r}")


class JsonGenericSerializer(Generic[T, U]):
    """
    JSON serializer dispatching on registered DTO modules.

    Use ``for_modules`` to build one; the nested type choice is mandatory:

    >>> serializer = JsonGenericSerializer.for_modules(module).without_nested_type()  # doctest: +SKIP
    >>> serializer = JsonGenericSerializer \\
    ...     .for_modules(module) \\
    ...     .with_nested_type_modules(child_module)  # doctest: +SKIP

    Parameters
    ----------
    modules : iterable of DTOModule
        Modules for top level objects.
    nested_modules : iterable of DTOModule, optional
        Modules for DTOs nested inside top level DTOs.

    Raises
    ------
    ValueError
        If no module is given, or two modules share a type name or a domain
        type.
    """

    class RequireNestedType:
        """
        Intermediate builder waiting for the nested type choice.
        """

        def __init__(self, modules: tuple[DTOModule, ...]) -> None:
            self._modules = modules

        def without_nested_type(self) -> JsonGenericSerializer:
            return JsonGenericSerializer(self._modules)

        def with_nested_type_modules(self, *nested_modules: DTOModule) -> JsonGenericSerializer:
            return JsonGenericSerializer(self._modules, nested_modules)

    # ========== ========== ========== ========== ========== special methods
    def __init__(self,
                 modules: Iterable[DTOModule[T, U]],
                 nested_modules: Iterable[DTOModule] = ()) -> None:

        self._logger = logging.getLogger("roundtrip.serializer")

        self._modules: tuple[DTOModule[T, U], ...] = tuple(modules)
        self._nested_modules: tuple[DTOModule, ...] = tuple(nested_modules)

        if not self._modules:
            raise ValueError("At least one DTO module is required")

        for module in (*self._modules, *self._nested_modules):
            check_types(module, DTOModule)

        self._modules_by_type_name: dict[str, DTOModule[T, U]] = self._index(self._modules, 'type_name')
        self._modules_by_domain_type: dict[type, DTOModule[T, U]] = self._index(self._modules, 'domain_type')

        nested_by_type_name = self._index(self._nested_modules, 'type_name')

        # only nested modules are tagged inside a DTO, the top level tag is added on output
        self._type_names: dict[type, str] = {module.dto_type: module.type_name for module in self._nested_modules}
        self._nested_dto_types: dict[str, Type[DTO]] = {
            type_name: module.dto_type for type_name, module in nested_by_type_name.items()
        }

    def __repr__(self) -> str:
        type_names = ', '.join(self._modules_by_type_name)
        return f"{type(self).__name__}({type_names})"

    # ========== ========== ========== ========== ========== protected methods
    @staticmethod
    def _index(modules: tuple[DTOModule, ...], attribute: str) -> dict[Any, DTOModule]:

        index = {}

        for module in modules:
            key = getattr(module, attribute)

            if key in index:
                raise ValueError(f"Several DTO modules share the {attribute} {key!r}")

            index[key] = module

        return index

    def _module_for(self, domain_type: type) -> DTOModule[T, U]:

        for cls in domain_type.__mro__:
            if cls in self._modules_by_domain_type:
                return self._modules_by_domain_type[cls]

        raise SerializationError(f"No DTO module is registered for {get_full_qualified_name(domain_type)}")

    # ========== ========== ========== ========== ========== public methods
    @classmethod
    def for_modules(cls, *modules: DTOModule) -> JsonGenericSerializer.RequireNestedType:
        return cls.RequireNestedType(modules)

    def serialize(self, obj: T) -> str:
        """
        Convert a domain object to JSON text.

        Raises
        ------
        SerializationError
            If no module handles the object's type, or its DTO holds a value
            without JSON representation.
        """
        module = self._module_for(type(obj))
        dto = module.to_dto(obj)

        try:
            data = DTO.serialize(dto, self._type_names)
        except TypeError as exc:
            raise SerializationError(str(exc)) from exc

        data = {TYPE_KEY: module.type_name, **data}

        self._logger.debug(f"Serialized {module.type_name!r} object")

        return json.dumps(data)

    def deserialize(self, text: str) -> T:
        """
        Convert JSON text to a domain object.

        Raises
        ------
        DeserializationError
            If the text is not a JSON object, has no string ``"type"``
            member, or does not match the DTO schema.
        UnknownTypeError
            If the ``"type"`` member names no registered module.
        """
        try:
            data = json.loads(text)
        except (TypeError, ValueError) as exc:
            raise DeserializationError(f"Malformed JSON: {exc}") from exc

        if not isinstance(data, dict):
            raise DeserializationError(f"Expected a JSON object, given {type(data).__name__}")

        type_name = data.get(TYPE_KEY)

        if not isinstance(type_name, str):
            raise DeserializationError(f"No {TYPE_KEY!r} property found in JSON object")

        if type_name not in self._modules_by_type_name:
            raise UnknownTypeError(type_name)

        module = self._modules_by_type_name[type_name]
        payload = {k: v for k, v in data.items() if k != TYPE_KEY}

        try:
            dto = module.dto_type.from_data(payload, self._nested_dto_types)
        except (TypeError, ValueError) as exc:
            raise DeserializationError(f"Cannot read {type_name!r} object: {exc}") from exc

        self._logger.debug(f"Deserialized {type_name!r} object")

        return module.to_domain_object(dto)

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def modules(self) -> tuple[DTOModule[T, U], ...]:
        return self._modules

    @property
    def nested_modules(self) -> tuple[DTOModule, ...]:
        return self._nested_modules


__all__ = [
    'Serializer',
    'DTOModule',
    'JsonGenericSerializer',
]
