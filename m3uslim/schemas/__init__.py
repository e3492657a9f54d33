"""
JSON schemas for m3uslim configuration files.

Deutsch:
    JSON-Schemata für die Konfigurationsdateien.
"""

from __future__ import annotations

__all__ = ["load_schema", "schema_validator"]

from functools import lru_cache
from importlib import resources
from json import load
from typing import Any, Dict

from jsonschema import Draft7Validator


def load_schema(name: str) -> Dict[str, Any]:
    with resources.files(__name__).joinpath(name).open("r", encoding="utf-8") as fh:
        return load(fh)


@lru_cache(maxsize=None)
def schema_validator(name: str) -> Draft7Validator:
    """
    Build a validator for a bundled schema, checking the schema itself first.

    Deutsch:
        Liefert einen geprüften Validator für ein mitgeliefertes Schema.
    """

    schema = load_schema(name)
    Draft7Validator.check_schema(schema)
    return Draft7Validator(schema)
