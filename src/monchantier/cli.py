"""
Command-line interface for MonChantier.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date

from monchantier import __version__
from monchantier.core.config import load_config, save_config, update_rates
from monchantier.core.dataset import load_snapshot
from monchantier.core.engine import aggregate
from monchantier.core.filters import FilterCriteria, PeriodPreset
from monchantier.core.records import RecordType
from monchantier.core.validation import validate_snapshot
from monchantier.fx import format_amount


def _save_json(path: str, data: dict) -> None:
    """Save data as JSON to file path."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def _parse_date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


def _build_criteria(args) -> FilterCriteria:
    """Translate filter-bar arguments into FilterCriteria."""
    criteria = FilterCriteria(
        entity_ids=frozenset(args.chantier or []),
        category_ids=frozenset(args.category or []),
        date_from=_parse_date(args.date_from),
        date_to=_parse_date(args.date_to),
        record_type=RecordType(args.type),
    )
    if args.period:
        today = _parse_date(args.today) or date.today()
        criteria = criteria.with_period(PeriodPreset(args.period), today)
    return criteria


def _print_kpis(summary: dict, rates, display: str) -> None:
    """Print the KPI cards to stdout."""
    kpis = summary["kpis"]
    print(f"Display currency: {display}")
    print(f"  Expenses:  {kpis['nb_expenses']:>4}  total {kpis['total_expenses']}")
    print(f"  Quotes:    {kpis['nb_quotes']:>4}  total {kpis['total_quotes']}")
    print(f"  Transfers: {kpis['nb_transfers']:>4}  total {kpis['total_transfers']}")
    print(f"  Average expense: {kpis['average_expense']}")
    print("Rates:")
    for code, rate in rates.items():
        print(f"  1 {code} = {format_amount(rate, rates.base_currency, rates)}")


def example_dataset() -> dict:
    """Minimal dataset with two chantiers in different currencies."""
    return {
        "chantiers": [
            {
                "id": "villa-sousse",
                "name": "Villa Sousse",
                "currency": "DNT",
                "budget": 250000,
                "status": "en_cours",
            },
            {
                "id": "immeuble-lyon",
                "name": "Immeuble Lyon",
                "currency": "EUR",
                "budget": 120000,
                "status": "en_cours",
            },
        ],
        "categories": [
            {"id": "gros_oeuvre", "name": "Gros oeuvre"},
            {"id": "main_oeuvre", "name": "Main d'oeuvre"},
            {"id": "materiel", "name": "Materiel"},
        ],
        "expenses": [
            {
                "id": "dep-1",
                "date": "2025-01-05",
                "amount": 12000,
                "chantier_id": "villa-sousse",
                "category_id": "gros_oeuvre",
                "payer": "Karim",
                "description": "Beton fondations",
            },
            {
                "id": "dep-2",
                "date": "2025-01-20",
                "amount": 1500,
                "chantier_id": "immeuble-lyon",
                "category_id": "materiel",
                "payer": "Sophie",
                "description": "Location grue",
            },
            {
                "id": "dep-3",
                "date": "2025-02-03",
                "amount": 4200,
                "chantier_id": "villa-sousse",
                "category_id": "main_oeuvre",
                "payer": "Karim",
                "description": "Equipe maconnerie",
            },
        ],
        "quotes": [
            {
                "id": "devis-1",
                "date": "2025-01-10",
                "amount": 8000,
                "chantier_id": "immeuble-lyon",
                "category_id": "gros_oeuvre",
                "supplier": "Lafarge",
            },
        ],
        "transfers": [
            {
                "id": "tr-1",
                "date": "2025-01-02",
                "amount": 5000,
                "currency": "EUR",
                "source": "Sophie",
                "destination": "Karim",
            },
        ],
    }


def cmd_example(_) -> int:
    """Print a minimal dataset JSON."""
    json.dump(example_dataset(), sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")
    return 0


def cmd_summary(args) -> int:
    """Aggregate a dataset and print or export the dashboard summary."""
    try:
        config = load_config(args.config)
        snapshot = load_snapshot(args.input)
        criteria = _build_criteria(args)

        view = aggregate(snapshot, config.rates, criteria)
        display = (args.currency or config.display_currency).upper()
        summary = view.summary(display)

        if args.output:
            _save_json(args.output, summary)
            print(f"Summary saved to {args.output}")
        elif args.json:
            json.dump(summary, sys.stdout, indent=2, ensure_ascii=False)
            sys.stdout.write("\n")
        else:
            print(f"{len(view.records)} records selected")
            _print_kpis(summary, config.rates, display)
        return 0

    except Exception as e:
        print(f"Error building summary: {e}", file=sys.stderr)
        return 1


def cmd_rates(args) -> int:
    """Show or update the exchange-rate table."""
    try:
        config = load_config(args.config)

        if args.set:
            if not args.config:
                raise ValueError("--config is required to save updated rates")
            updates = {}
            for item in args.set:
                code, sep, value = item.partition("=")
                if not sep:
                    raise ValueError(f"Expected CUR=RATE, got '{item}'")
                updates[code.strip().upper()] = float(value)
            config = update_rates(config, updates)
            save_config(config, args.config)

        if args.json:
            json.dump(config.to_dict(), sys.stdout, indent=2)
            sys.stdout.write("\n")
        else:
            print(f"Base currency: {config.rates.base_currency}")
            print(f"Display currency: {config.display_currency}")
            for code, rate in config.rates.items():
                print(f"  1 {code} = {rate} {config.rates.base_currency}")
            if config.last_updated:
                print(f"Last updated: {config.last_updated.isoformat()}")
        return 0

    except Exception as e:
        print(f"Error updating rates: {e}", file=sys.stderr)
        return 1


def cmd_validate(args) -> int:
    """Validate a dataset against the configured rate table."""
    try:
        config = load_config(args.config)
        snapshot = load_snapshot(args.input)
        report = validate_snapshot(snapshot, config.rates)

        if args.format == "json":
            json.dump(report.to_dict(), sys.stdout, indent=2)
            sys.stdout.write("\n")
        else:
            print(str(report))

        return report.get_exit_code()

    except Exception as e:
        print(f"Validation failed: {e}", file=sys.stderr)
        return 1


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the ``monchantier`` command."""
    parser = argparse.ArgumentParser(
        prog="monchantier",
        description="MonChantier - Construction-site financial dashboard engine",
    )

    parser.add_argument(
        "--version", action="version", version=f"MonChantier {__version__}"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(
        dest="cmd", required=True, help="Available commands"
    )

    # Example command
    example_parser = subparsers.add_parser(
        "example", help="Print a minimal dataset JSON"
    )
    example_parser.set_defaults(func=cmd_example)

    # Summary command
    summary_parser = subparsers.add_parser(
        "summary", help="Aggregate a dataset into the dashboard summary"
    )
    summary_parser.add_argument(
        "-i", "--input", required=True, help="Input dataset (YAML or JSON)"
    )
    summary_parser.add_argument(
        "-c", "--config", help="Configuration file with exchange rates"
    )
    summary_parser.add_argument(
        "-o", "--output", help="Write the summary JSON to this file"
    )
    summary_parser.add_argument(
        "--json", action="store_true", help="Print the summary as JSON"
    )
    summary_parser.add_argument(
        "--chantier", nargs="*", help="Keep only these chantier ids"
    )
    summary_parser.add_argument(
        "--category", nargs="*", help="Keep only these category ids"
    )
    summary_parser.add_argument(
        "--from", dest="date_from", help="Start date (YYYY-MM-DD, inclusive)"
    )
    summary_parser.add_argument(
        "--to", dest="date_to", help="End date (YYYY-MM-DD, inclusive)"
    )
    summary_parser.add_argument(
        "--period",
        choices=[p.value for p in PeriodPreset],
        help="Period preset (overrides --from/--to)",
    )
    summary_parser.add_argument(
        "--today", help="Reference day for --period (default: today)"
    )
    summary_parser.add_argument(
        "--type",
        choices=[t.value for t in RecordType],
        default=RecordType.ALL.value,
        help="Record type to include (default: all)",
    )
    summary_parser.add_argument(
        "--currency", help="Display currency (default: from config)"
    )
    summary_parser.set_defaults(func=cmd_summary)

    # Rates command
    rates_parser = subparsers.add_parser(
        "rates", help="Show or update the exchange-rate table"
    )
    rates_parser.add_argument(
        "-c", "--config", help="Configuration file with exchange rates"
    )
    rates_parser.add_argument(
        "--set",
        nargs="*",
        metavar="CUR=RATE",
        help="Set rates, one unit of CUR in base currency (e.g. EUR=3.4)",
    )
    rates_parser.add_argument(
        "--json", action="store_true", help="Output in JSON format"
    )
    rates_parser.set_defaults(func=cmd_rates)

    # Validate command
    validate_parser = subparsers.add_parser(
        "validate", help="Validate a dataset"
    )
    validate_parser.add_argument(
        "-i", "--input", required=True, help="Input dataset (YAML or JSON)"
    )
    validate_parser.add_argument(
        "-c", "--config", help="Configuration file with exchange rates"
    )
    validate_parser.add_argument(
        "--format", choices=["human", "json"], default="human", help="Output format"
    )
    validate_parser.set_defaults(func=cmd_validate)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
