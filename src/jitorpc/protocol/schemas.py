from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema import FormatChecker

RESPONSE_SCHEMA = "jsonrpc.response.schema.json"
TIP_ACCOUNTS_SCHEMA = "tip.accounts.schema.json"
BUNDLE_STATUSES_SCHEMA = "bundle.statuses.schema.json"



class SchemaValidationError(ValueError):
    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


@dataclass(frozen=True)
class SchemaRegistry:
    schema_root: Path

    @staticmethod
    def discover_root() -> Path:
        root = Path(__file__).resolve().parent / "v1"
        if not root.is_dir():
            raise FileNotFoundError(f"Unable to locate jitorpc schemas directory: {root}")
        return root

    @classmethod
    def default(cls) -> "SchemaRegistry":
        return _default_registry()

    def schema_path(self, schema_filename: str) -> Path:
        return self.schema_root / schema_filename

    def load_schema(self, schema_filename: str) -> dict[str, Any]:
        path = self.schema_path(schema_filename)
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)

    def validator_for(self, schema_filename: str) -> jsonschema.Validator:
        return _validator(self.schema_root, schema_filename)

    def validate_instance(self, instance: Any, schema_filename: str) -> None:
        validator = self.validator_for(schema_filename)
        errors = sorted(validator.iter_errors(instance), key=lambda e: [str(part) for part in e.path])
        if errors:
            formatted = [self._format_error(err) for err in errors]
            raise SchemaValidationError(
                f"Schema validation failed for {schema_filename}: {formatted[0]}",
                errors=formatted,
            )

    @staticmethod
    def _format_error(error: jsonschema.ValidationError) -> str:
        location = "/".join(str(part) for part in error.path) or "<root>"
        return f"{location}: {error.message}"


@lru_cache(maxsize=None)
def _default_registry() -> SchemaRegistry:
    return SchemaRegistry(schema_root=SchemaRegistry.discover_root())


@lru_cache(maxsize=None)
def _validator(schema_root: Path, schema_filename: str) -> jsonschema.Validator:
    with (schema_root / schema_filename).open("r", encoding="utf-8") as f:
        schema = json.load(f)
    validator_cls = jsonschema.validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema, format_checker=FormatChecker())


__all__ = [
    "BUNDLE_STATUSES_SCHEMA",
    "RESPONSE_SCHEMA",
    "TIP_ACCOUNTS_SCHEMA",
    "SchemaRegistry",
    "SchemaValidationError",
]
