import json
from pathlib import Path
from typing import Any, Optional

from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match

_SCHEMA_CACHE: dict[str, dict[str, Any]] = {}

DEFAULT_SCHEMA_PATH = Path(__file__).resolve().parent / "skill-rules.schema.json"


def format_schema_error(error: Any) -> str:
    path = ".".join([str(part) for part in error.path])
    return f"{error.message} at {path}" if path else str(error.message)


class RulesSchemaRepository:
    def __init__(self, local_schema_path: Optional[Path] = None) -> None:
        self.local_schema_path = local_schema_path or DEFAULT_SCHEMA_PATH

    def load_schema(self) -> dict[str, Any]:
        key = str(self.local_schema_path.resolve())
        cached = _SCHEMA_CACHE.get(key)
        if cached is not None:
            return cached
        schema = json.loads(self.local_schema_path.read_text(encoding="utf-8"))
        _SCHEMA_CACHE[key] = schema
        return schema

    def validator(self) -> Draft202012Validator:
        return Draft202012Validator(self.load_schema())


def first_schema_error(validator: Draft202012Validator, payload: Any) -> str | None:
    error = best_match(validator.iter_errors(payload))
    if error is None:
        return None
    return format_schema_error(error)
