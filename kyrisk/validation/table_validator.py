from __future__ import annotations
from typing import Any, Dict, List

from jsonschema import Draft7Validator

FALLBACK_TEMPLATE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["patterns", "hazard", "countermeasure"],
    "properties": {
        "patterns": {"type": "array", "items": {"type": "string", "minLength": 1}},
        "hazard": {"type": "string", "minLength": 1},
        "countermeasure": {"type": "string", "minLength": 1},
    },
}

GENERIC_FALLBACK_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["hazard", "countermeasure"],
    "properties": {
        "hazard": {"type": "string", "minLength": 1},
        "countermeasure": {"type": "string", "minLength": 1},
    },
}


def validate_entries(entries: list, schema: Dict[str, Any] = FALLBACK_TEMPLATE_SCHEMA) -> List[dict]:
    """
    Returns a list of error dicts: {"index": i, "errors": [str, ...]}
    """
    validator = Draft7Validator(schema)
    problems = []
    for i, entry in enumerate(entries or []):
        errs = [f"{'.'.join([str(p) for p in e.path]) or '$'}: {e.message}" for e in validator.iter_errors(entry)]
        if errs:
            problems.append({"index": i, "errors": errs})
    return problems
