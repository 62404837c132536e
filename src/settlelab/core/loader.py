"""Utilities for loading ledger snapshots from YAML/JSON sources."""

from __future__ import annotations

import json
import warnings
from copy import deepcopy
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

import yaml

from .context import SettlementContext
from .entries import EXPENSE_COLUMNS, REVENUE_COLUMNS, RowMapping
from .errors import ConfigError, LedgerFileError
from .forecast import CashFlowForecast

_SECTIONS = {"revenues", "expenses", "accounts", "columns", "settings"}

__all__ = [
    "LedgerBook",
    "load_ledger",
]


@dataclass(slots=True)
class LedgerBook:
    """Raw rows and settings read from a ledger file."""

    revenues: list[dict[str, Any]] = field(default_factory=list)
    expenses: list[dict[str, Any]] = field(default_factory=list)
    accounts: list[dict[str, Any]] = field(default_factory=list)
    revenue_columns: RowMapping = REVENUE_COLUMNS
    expense_columns: RowMapping = EXPENSE_COLUMNS
    settings: dict[str, Any] = field(default_factory=dict)
    source: str = "<memory>"

    def context(self, today: date | None = None) -> SettlementContext:
        """Settlement context built from the file settings, optionally pinned to ``today``."""
        kwargs: dict[str, Any] = {
            "revenue_columns": self.revenue_columns,
            "expense_columns": self.expense_columns,
        }
        if "currency" in self.settings:
            kwargs["currency"] = str(self.settings["currency"])
        if "tolerance" in self.settings:
            kwargs["balance_tolerance"] = self.settings["tolerance"]
        try:
            if today is not None:
                return SettlementContext.fixed(today, **kwargs)
            return SettlementContext(**kwargs)
        except ConfigError as e:
            raise LedgerFileError(f"{self.source}::settings: {e}") from e

    def to_forecast(self, today: date | None = None) -> CashFlowForecast:
        return CashFlowForecast.from_rows(
            revenues=self.revenues,
            expenses=self.expenses,
            accounts=self.accounts,
            context=self.context(today),
        )


def load_ledger(
    source: str | Path | dict[str, Any], *, format: str | None = None
) -> LedgerBook:
    """
    Parse a ledger snapshot from YAML/JSON/dict.

    Expected top-level keys (all optional): ``revenues``, ``expenses`` and
    ``accounts`` (lists of row mappings), ``columns`` (``revenues`` /
    ``expenses`` column overrides) and ``settings`` (``tolerance``,
    ``currency``). Row *contents* are not validated here; the engine degrades
    gracefully on bad values.

    Raises:
        FileNotFoundError: If ``source`` is a path that does not exist
        LedgerFileError: If the document structure is invalid
    """
    mapping, label = _read_source(source, format=format)
    unknown = set(mapping) - _SECTIONS
    if unknown:
        warnings.warn(
            f"{label}: ignoring unknown sections {', '.join(sorted(unknown))}",
            category=UserWarning,
            stacklevel=2,
        )
    columns = _ensure_dict(mapping.get("columns"), f"{label}::columns")
    return LedgerBook(
        revenues=_ensure_rows(mapping.get("revenues"), f"{label}::revenues"),
        expenses=_ensure_rows(mapping.get("expenses"), f"{label}::expenses"),
        accounts=_ensure_rows(mapping.get("accounts"), f"{label}::accounts"),
        revenue_columns=_columns(columns.get("revenues"), REVENUE_COLUMNS, label),
        expense_columns=_columns(columns.get("expenses"), EXPENSE_COLUMNS, label),
        settings=_ensure_dict(mapping.get("settings"), f"{label}::settings"),
        source=label,
    )


def _read_source(
    source: str | Path | dict[str, Any], *, format: str | None
) -> tuple[dict[str, Any], str]:
    if isinstance(source, dict):
        return deepcopy(source), "<mapping>"

    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(path)

    fmt = (format or path.suffix.lstrip(".")).lower()
    text = path.read_text(encoding="utf-8")
    try:
        if fmt in {"yaml", "yml", ""}:
            data = yaml.safe_load(text)
        elif fmt == "json":
            data = json.loads(text)
        else:
            raise LedgerFileError(f"Unsupported ledger format '{fmt}' for {path}")
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise LedgerFileError(f"Could not parse {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise LedgerFileError(f"Ledger root must be a mapping in {path}")
    return data, str(path)


def _ensure_dict(value: Any, label: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise LedgerFileError(f"{label} must be a mapping")
    return dict(value)


def _ensure_rows(value: Any, label: str) -> list[dict[str, Any]]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise LedgerFileError(f"{label} must be a list of rows")
    rows = []
    for idx, row in enumerate(value):
        if not isinstance(row, dict):
            raise LedgerFileError(f"{label}[{idx}] must be a mapping")
        rows.append(dict(row))
    return rows


def _columns(value: Any, base: RowMapping, label: str) -> RowMapping:
    overrides = _ensure_dict(value, f"{label}::columns")
    unknown = set(overrides) - set(RowMapping.__dataclass_fields__)
    if unknown:
        raise LedgerFileError(
            f"{label}::columns has unknown fields: {', '.join(sorted(unknown))}"
        )
    return RowMapping.from_dict(overrides, base=base)
