"""
Command-line interface for SettleLab.
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from datetime import date
from decimal import Decimal
from enum import Enum

from settlelab import __version__
from settlelab.core.dates import PRESETS, DateRange, parse_date, preset_range
from settlelab.core.errors import ConfigError
from settlelab.core.loader import load_ledger


class LedgerEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimals, dates, enums and engine dataclasses."""

    def default(self, obj):
        if isinstance(obj, Decimal):
            return str(obj)
        elif isinstance(obj, date):
            return obj.isoformat()
        elif isinstance(obj, Enum):
            return obj.value
        elif dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
        return super().default(obj)


def _save_json(path: str | None, data: dict) -> None:
    """Save data as JSON to file path, or stdout when no path is given."""
    if path is None:
        json.dump(data, sys.stdout, indent=2, cls=LedgerEncoder)
        sys.stdout.write("\n")
        return
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, cls=LedgerEncoder)


def _parse_day(value: str | None, label: str) -> date | None:
    if value is None:
        return None
    parsed = parse_date(value)
    if parsed is None:
        raise ConfigError(f"Invalid {label} date '{value}' (expected YYYY-MM-DD)")
    return parsed


def _date_range(args, today: date) -> DateRange | None:
    if args.preset:
        return preset_range(args.preset, today)
    start = _parse_day(args.start, "start")
    end = _parse_day(args.end, "end")
    if start is None and end is None:
        return None
    return DateRange(start or date.min, end or date.max)


def cmd_example(_) -> int:
    """Print a minimal ledger JSON."""
    example = {
        "settings": {"currency": "BRL", "tolerance": 0.009},
        "accounts": [
            {"id": "itau", "name": "Conta Itaú", "initial_balance": 1000.0, "current_balance": 1050.0}
        ],
        "revenues": [
            {
                "id": "r1",
                "description": "Procedimento estético",
                "data_competencia": "2026-01-01",
                "forma_pagamento": "Cartão de Crédito",
                "parcelas": 2,
                "valor_liquido": 100.0,
                "bank_account_id": "itau",
            },
            {
                "id": "r2",
                "description": "Consulta",
                "data_competencia": "2026-01-09",
                "forma_pagamento": "Débito",
                "valor_liquido": 250.0,
                "bank_account_id": "itau",
            },
            {
                "id": "r3",
                "description": "Pacote",
                "data_competencia": "2026-01-10",
                "forma_pagamento": "Boleto",
                "valor_liquido": 900.0,
                "recebimento_parcelas": '[{"vencimento": "2026-01-20"}, {"vencimento": "2026-02-20"}, {"vencimento": "2026-03-20"}]',
                "bank_account_id": "itau",
            },
        ],
        "expenses": [
            {
                "id": "e1",
                "description": "Aluguel",
                "data_competencia": "2026-01-05",
                "data_vencimento": "2026-01-10",
                "data_pagamento": "2026-01-10",
                "forma_pagamento": "PIX",
                "valor": 400.0,
                "status": "paid",
                "bank_account_id": "itau",
            }
        ],
    }
    json.dump(example, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")
    return 0


def cmd_forecast(args) -> int:
    """Run the cash-flow forecast and export daily/monthly series."""
    try:
        book = load_ledger(args.input)
        today = _parse_day(args.today, "today")
        forecast = book.to_forecast(today)
        if args.recalculate:
            forecast = forecast.with_recalculated_balances()
        result = forecast.run(_date_range(args, forecast.context.today()))

        payload = {
            "summary": result.summary(),
            "daily": [
                {
                    "date": b.date,
                    "total_in": b.total_in,
                    "total_out": b.total_out,
                    "net": b.net,
                    "cumulative_balance": b.cumulative_balance,
                    "reconciled_balance": b.reconciled_balance,
                    "opening_balance": b.opening_balance,
                }
                for b in result.daily
            ],
            "monthly": [
                {
                    "month": f"{b.year:04d}-{b.month:02d}",
                    "total_in": b.total_in,
                    "total_out": b.total_out,
                    "net": b.net,
                    "cumulative_balance": b.cumulative_balance,
                    "bank_balance": b.bank_balance,
                }
                for b in result.monthly
            ],
            "accrual": [
                {
                    "month": f"{a.year:04d}-{a.month:02d}",
                    "revenue": a.revenue,
                    "expense": a.expense,
                    "result": a.result,
                }
                for a in result.accrual
            ],
        }
        if args.parcels:
            payload["parcels"] = [
                {
                    "entry": p.source_entry_id,
                    "index": p.index,
                    "date": p.scheduled_date,
                    "amount": p.signed_amount,
                }
                for p in result.parcels
            ]
        _save_json(args.output, payload)
        if args.output:
            print(f"Forecast written to {args.output} ({len(result.daily)} days)")
        return 0

    except Exception as e:
        print(f"Forecast failed: {e}", file=sys.stderr)
        return 1


def cmd_balances(args) -> int:
    """Show the recalculated balance of every bank account."""
    try:
        book = load_ledger(args.input)
        forecast = book.to_forecast(_parse_day(args.today, "today"))
        corrections = forecast.recalculate_balances()

        if args.json:
            _save_json(None, {"accounts": corrections})
        else:
            for c in corrections:
                flag = " *" if c.needs_update else ""
                print(
                    f"{c.account_id}: {c.previous_balance} -> {c.corrected_balance}{flag}"
                )
                print(
                    f"  realized revenue: {c.realized_revenue}  "
                    f"paid expenses: {c.realized_expense}"
                )
            if any(c.needs_update for c in corrections):
                print("* stored balance drifted beyond tolerance")
        return 0

    except Exception as e:
        print(f"Balance recalculation failed: {e}", file=sys.stderr)
        return 1


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="settlelab", description="SettleLab - Cash-flow settlement engine"
    )
    parser.add_argument(
        "--version", action="version", version=f"SettleLab {__version__}"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(
        dest="cmd", required=True, help="Available commands"
    )

    # Example command
    example_parser = subparsers.add_parser(
        "example", help="Print a minimal ledger JSON"
    )
    example_parser.set_defaults(func=cmd_example)

    # Forecast command
    forecast_parser = subparsers.add_parser(
        "forecast", help="Project settlements and export daily/monthly series"
    )
    forecast_parser.add_argument(
        "-i", "--input", required=True, help="Input ledger file (YAML or JSON)"
    )
    forecast_parser.add_argument(
        "-o", "--output", help="Output JSON file (default: stdout)"
    )
    forecast_parser.add_argument("--start", help="Window start (YYYY-MM-DD)")
    forecast_parser.add_argument("--end", help="Window end (YYYY-MM-DD)")
    forecast_parser.add_argument(
        "--preset", choices=PRESETS, help="Preset window around today"
    )
    forecast_parser.add_argument(
        "--today", help="Anchor day (YYYY-MM-DD, default: system date)"
    )
    forecast_parser.add_argument(
        "--recalculate",
        action="store_true",
        help="Recalculate account balances from realized cash before reconciling",
    )
    forecast_parser.add_argument(
        "--parcels", action="store_true", help="Include individual parcels"
    )
    forecast_parser.set_defaults(func=cmd_forecast)

    # Balances command
    balances_parser = subparsers.add_parser(
        "balances", help="Recalculate bank account balances from realized cash"
    )
    balances_parser.add_argument(
        "-i", "--input", required=True, help="Input ledger file (YAML or JSON)"
    )
    balances_parser.add_argument(
        "--today", help="Anchor day (YYYY-MM-DD, default: system date)"
    )
    balances_parser.add_argument(
        "--json", action="store_true", help="Output in JSON format"
    )
    balances_parser.set_defaults(func=cmd_balances)

    # Parse arguments and execute
    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
