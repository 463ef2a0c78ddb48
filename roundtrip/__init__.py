#  -*- coding: utf-8 -*-
"""
Roundtrip: round-trip verification of JSON serialization contracts.

Roundtrip checks that a serializer turns domain objects into the JSON you
expect and turns that JSON back into objects equal, field by field, to the
ones you started from.

Key Features
------------
- **Immutable builder**: Accumulate cases without mutating shared verifiers
- **Structural JSON equality**: Key order and formatting never matter
- **Deep field-wise equality**: Objects compared field by field, not by ``__eq__``
- **DTO modules**: A generic JSON serializer driven by descriptor-declared DTOs
- **Rich terminal output**: Verifiers and failures render as styled panels

Modules
-------
verifier
    JsonSerializationVerifier, the fail-fast round-trip verifier
equality
    Structural JSON and deep field-wise comparisons
serializer
    Serializer protocol, DTOModule and JsonGenericSerializer
dto
    DTO base class and DTOProperty descriptor
display
    Rich rendering of verification failures: Displayable and DisplaySettings
errors
    Serializer errors and verification failures

Examples
--------
Verify a DTO module:

>>> from roundtrip import JsonSerializationVerifier
>>>
>>> JsonSerializationVerifier.dto_module(quota_module) \\
...     .bean(Quota(limit=10)) \\
...     .json('{"type": "quota", "limit": 10}') \\
...     .verify()  # doctest: +SKIP
"""


from .dto import *
from .errors import *
from .equality import *
from .serializer import *
from .display import *
from .verifier import *


__all__ = [
    "JsonSerializationVerifier",
    "RequireJson",
    "RoundTripCase",
    "Serializer",
    "DTOModule",
    "JsonGenericSerializer",
    "DTO",
    "DTOProperty",
    "Difference",
    "json_differences",
    "field_differences",
    "register_leaf_type",
    "remove_leaf_type",
    "Displayable",
    "DisplaySettings",
    "SerializationError",
    "DeserializationError",
    "UnknownTypeError",
    "VerificationError",
    "SerializationMismatch",
    "DeserializationMismatch",
]


try:
    # this will run if roundtrip is installed
    from importlib.metadata import metadata, PackageNotFoundError

    meta = metadata('roundtrip')

    __author__ = meta.get('Author')
    __license__ = meta.get('License-Expression') or meta.get('License')
    __version__ = meta['Version']

except PackageNotFoundError:
    # this will run during development
    import toml
    from pathlib import Path

    pyproject_filepath = Path(__file__).parent.parent / "pyproject.toml"

    with pyproject_filepath.open() as file:
        pyproject = toml.load(file)

    __version__ = pyproject["project"]["version"]
    __author__ = pyproject["project"]["authors"][0]["name"]
    __license__ = pyproject["project"]["license"]
