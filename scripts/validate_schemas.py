"""Checks every request schema and the $ref links between them."""

from pathlib import Path
import json
from jsonschema import Draft202012Validator


SCHEMA_DIR = Path(__file__).resolve().parent.parent / "marketplace" / "schemas"


def validate() -> None:
    ids: dict[str, str] = {}
    for schema in sorted(SCHEMA_DIR.glob("*.json")):
        data = json.loads(schema.read_text())
        Draft202012Validator.check_schema(data)
        if data["$id"] in ids:
            raise ValueError(f"{schema.name} reuses $id of {ids[data['$id']]}")
        ids[data["$id"]] = schema.name
    for schema in sorted(SCHEMA_DIR.glob("*.json")):
        for ref in _refs(json.loads(schema.read_text())):
            if ref not in ids:
                raise ValueError(f"{schema.name} references unknown schema {ref}")


def _refs(node):
    if isinstance(node, dict):
        if "$ref" in node:
            yield node["$ref"]
        for value in node.values():
            yield from _refs(value)
    elif isinstance(node, list):
        for item in node:
            yield from _refs(item)


if __name__ == "__main__":
    validate()
