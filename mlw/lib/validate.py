"""
Schema validation for MLW documents.

Validates data against JSON Schema at every boundary where data enters
from outside (snapshot restore). Fails hard with clear errors.
"""

import json
from pathlib import Path

import jsonschema

from mlw.errors import SnapshotError

# Cache loaded schemas
_schema_cache: dict[str, dict] = {}


def _get_schemas_dir() -> Path:
    """Get path to the packaged schemas directory."""
    return Path(__file__).parent.parent / "schemas"


def _load_schema(schema_name: str) -> dict:
    """Load schema by name, with caching."""
    if schema_name not in _schema_cache:
        schema_path = _get_schemas_dir() / f"{schema_name}.schema.json"
        if not schema_path.exists():
            raise SnapshotError(f"[{schema_name}] Schema file not found: {schema_path}")
        _schema_cache[schema_name] = json.loads(schema_path.read_text())
    return _schema_cache[schema_name]


def validate(data: object, schema_name: str) -> None:
    """
    Validate data against named schema.

    Args:
        data: Parsed JSON document
        schema_name: Schema name (e.g., "snapshot")

    Raises:
        SnapshotError: If validation fails
    """
    schema = _load_schema(schema_name)

    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as e:
        path = ".".join(str(p) for p in e.absolute_path) if e.absolute_path else "(root)"
        raise SnapshotError(f"[{schema_name}] {e.message}", path) from None
