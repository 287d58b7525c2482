# kyrisk/config.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

# Optional: load .env in local dev
load_dotenv()


PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_TEMPLATES_PATH = PACKAGE_DIR / "data" / "fallback_templates.yaml"


def _load_yaml(path: str | Path) -> dict:
    """Best-effort YAML loader; returns {} if the file is missing or unreadable."""
    p = Path(path)
    if not p.exists():
        return {}
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        print(f"[config] could not read {p}: {e!r}")
        return {}
    return data if isinstance(data, dict) else {}


def _getenv_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return str(v).strip().lower() in ("1", "true", "yes", "on")


def _getenv_float(name: str, default: float) -> float:
    v = os.getenv(name)
    if v is None or not str(v).strip():
        return default
    try:
        return float(v)
    except ValueError:
        print(f"[config] ignoring non-numeric {name}={v!r}")
        return default


def _getenv_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or not str(v).strip():
        return default
    try:
        return int(v)
    except ValueError:
        print(f"[config] ignoring non-integer {name}={v!r}")
        return default


def get_config() -> Dict[str, Any]:
    """
    Central place for engine config.
    Merges (in order): defaults <- YAML (if present) <- ENV.
    """
    cfg: Dict[str, Any] = {}
    for candidate in ("kyrisk/config.yaml", "config.yaml"):
        cfg.update(_load_yaml(candidate))

    defaults = {
        "triage_limit": 5,
        "similarity_threshold": 0.72,
        "templates_path": str(DEFAULT_TEMPLATES_PATH),
        "coefficients": {},
    }

    merged = {**defaults, **cfg}

    # ENV overrides
    merged["triage_limit"] = _getenv_int("KY_TRIAGE_LIMIT", int(merged["triage_limit"]))
    merged["similarity_threshold"] = _getenv_float(
        "KY_SIMILARITY_THRESHOLD", float(merged["similarity_threshold"])
    )
    merged["templates_path"] = os.getenv("KY_TEMPLATES_PATH", merged["templates_path"])

    return merged


def load_coefficient_table(cfg: Dict[str, Any] | None = None):
    """
    Build a CoefficientTable from the optional `coefficients:` section.
    Partial overrides are merged over the defaults; an invalid section is
    reported and the defaults are used instead.
    """
    from kyrisk.risk.coefficients import CoefficientTable, DEFAULT_COEFF

    cfg = cfg if cfg is not None else get_config()
    override = cfg.get("coefficients") or {}
    if not isinstance(override, dict) or not override:
        return DEFAULT_COEFF

    base = DEFAULT_COEFF.model_dump()
    for section, values in override.items():
        if isinstance(values, dict) and isinstance(base.get(section), dict):
            base[section] = {**base[section], **values}
        else:
            base[section] = values
    try:
        return CoefficientTable.model_validate(base)
    except ValidationError as e:
        print(f"[config] invalid coefficients override, using defaults: {e.error_count()} error(s)")
        return DEFAULT_COEFF


def load_triage_tables(cfg: Dict[str, Any] | None = None):
    """
    DEFAULT_TABLES with the configured similarity threshold applied.
    Values outside the table's bounds are reported and ignored.
    """
    from kyrisk.triage.tables import DEFAULT_TABLES, TriageTables

    cfg = cfg if cfg is not None else get_config()
    threshold = cfg.get("similarity_threshold", DEFAULT_TABLES.similarity_threshold)
    try:
        return TriageTables.model_validate(
            {**DEFAULT_TABLES.model_dump(), "similarity_threshold": threshold}
        )
    except ValidationError as e:
        print(f"[config] invalid similarity_threshold {threshold!r}, using defaults: {e.error_count()} error(s)")
        return DEFAULT_TABLES
