"""Schema validation helpers wired to the JSON Schema definitions in this repo."""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator, ValidationError, validators
from referencing import Registry, Resource

from ..exceptions import ValidationException

logger = logging.getLogger(__name__)


def _is_integer(checker: Any, instance: Any) -> bool:
    # ids are stored and indexed as integers, so 1.0 does not count as one
    return isinstance(instance, int) and not isinstance(instance, bool)


RequestValidator = validators.extend(
    Draft202012Validator,
    type_checker=Draft202012Validator.TYPE_CHECKER.redefine("integer", _is_integer),
)


def prune_nulls(payload: Any) -> Any:
    """Drop ``None`` members so that explicit nulls count as missing fields."""
    if isinstance(payload, dict):
        return {key: prune_nulls(value) for key, value in payload.items() if value is not None}
    if isinstance(payload, list):
        return [prune_nulls(item) for item in payload]
    return payload


def describe_error(error: ValidationError) -> list[str]:
    prefix = ".".join(str(part) for part in error.absolute_path)
    if error.validator == "required" and isinstance(error.instance, dict):
        missing = [name for name in error.validator_value if name not in error.instance]
        return [f"{prefix}.{name} missing" if prefix else f"{name} missing" for name in missing]
    if prefix:
        return [f"{prefix}: {error.message}"]
    return [error.message]


class SchemaRegistry:
    def __init__(self, schema_dir: Path) -> None:
        self._schema_dir = schema_dir
        self._validators: dict[str, Any] = {}
        self._load()

    def _load(self) -> None:
        schemas: dict[str, dict[str, Any]] = {}
        for schema_path in sorted(self._schema_dir.glob("*.json")):
            data = json.loads(schema_path.read_text())
            Draft202012Validator.check_schema(data)
            schemas[schema_path.stem] = data
        registry = Registry().with_resources(
            (data["$id"], Resource.from_contents(data)) for data in schemas.values()
        )
        for name, data in schemas.items():
            self._validators[name] = RequestValidator(
                data,
                registry=registry,
                format_checker=Draft202012Validator.FORMAT_CHECKER,
            )

    def names(self) -> list[str]:
        return sorted(self._validators)

    def violations(self, schema_name: str, payload: Any) -> list[str]:
        try:
            validator = self._validators[schema_name]
        except KeyError as exc:
            raise ValueError(f"unknown schema {schema_name}") from exc
        found: list[str] = []
        errors = sorted(
            validator.iter_errors(prune_nulls(payload)),
            key=lambda error: [str(part) for part in error.absolute_path],
        )
        for error in errors:
            for violation in describe_error(error):
                if violation not in found:
                    found.append(violation)
        return found

    def validate(self, schema_name: str, payload: Any) -> None:
        found = self.violations(schema_name, payload)
        if found:
            logger.error(f"Request body is not valid, {', '.join(found)}")
            raise ValidationException("Request body is not valid", found)


@lru_cache(maxsize=1)
def get_schema_registry() -> SchemaRegistry:
    schema_dir = Path(__file__).resolve().parent.parent / "schemas"
    return SchemaRegistry(schema_dir)
