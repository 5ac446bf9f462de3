"""Command-line interface.

Usage:
    loanchain analyze agreement.pdf                         # Local pattern engine
    loanchain analyze agreement.pdf --mode remote           # Groq (GROQ_API_KEY)
    loanchain analyze agreement.pdf --mode remote --provider bedrock
    loanchain simulate agreement.pdf --percentage 25 --price 99 --save
    loanchain vault list
"""

import argparse
import asyncio
import json
import sys
from dataclasses import replace
from typing import Optional

from .common.config import Settings
from .common.exceptions import DocumentProcessingError, DocumentRejected
from .common.models import ExtractionMode
from .pipeline import analyze_document
from .session import SessionState
from .trading import DEFAULT_TRADE_PERCENTAGE, DEFAULT_TRADE_PRICE, simulate_trade
from .vault import DealVault, build_deal_sheet, sort_by_timestamp

EXIT_ERROR = 1
EXIT_REJECTED = 2


def _settings_from_args(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env()
    overrides = {}
    if getattr(args, "mode", None):
        overrides["extraction_mode"] = args.mode
    if getattr(args, "provider", None):
        overrides["remote_provider"] = args.provider
    if getattr(args, "api_key", None):
        overrides["groq_api_key"] = args.api_key
    if getattr(args, "max_pages", None):
        overrides["max_pages"] = args.max_pages
    if getattr(args, "vault_dir", None):
        overrides["vault_dir"] = args.vault_dir
    settings = replace(settings, **overrides)
    settings.validate()
    return settings


def cmd_analyze(args: argparse.Namespace) -> int:
    settings = _settings_from_args(args)
    result = asyncio.run(analyze_document(args.pdf, settings=settings))
    print(json.dumps(result.to_dict(), indent=2))
    return 0


def cmd_simulate(args: argparse.Namespace) -> int:
    settings = _settings_from_args(args)
    session = SessionState()
    token = session.begin_attempt()
    result = asyncio.run(analyze_document(args.pdf, settings=settings))
    session.apply_result(token, result)

    session.add_trade(simulate_trade(session.participants, percentage=args.percentage, price=args.price))
    deal_sheet = build_deal_sheet(session.agreement, session.last_trade)
    session.add_deal_sheet(deal_sheet)

    if args.save:
        path = DealVault(settings.vault_dir).save(deal_sheet)
        deal_sheet = dict(deal_sheet, savedTo=str(path))

    print(json.dumps(deal_sheet, indent=2))
    return 0


def cmd_vault_list(args: argparse.Namespace) -> int:
    settings = _settings_from_args(args)
    deals = sort_by_timestamp(DealVault(settings.vault_dir).load_all())
    if not deals:
        print("No deals saved yet")
        return 0
    for deal in deals:
        print(f"{deal.get('timestamp', '?')}  {deal.get('title', deal.get('id', '?'))}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="loanchain",
        description="Extract syndicated loan terms from agreement PDFs",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_extraction_args(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("pdf", help="Path to the agreement PDF")
        sub.add_argument("--mode", choices=[m.value for m in ExtractionMode])
        sub.add_argument("--provider", choices=["groq", "bedrock"])
        sub.add_argument("--api-key", dest="api_key", help="Groq API key (default: GROQ_API_KEY)")
        sub.add_argument("--max-pages", dest="max_pages", type=int)

    analyze = subparsers.add_parser("analyze", help="Extract deal terms and print them as JSON")
    add_extraction_args(analyze)
    analyze.set_defaults(func=cmd_analyze)

    simulate = subparsers.add_parser("simulate", help="Extract deal terms and simulate a secondary trade")
    add_extraction_args(simulate)
    simulate.add_argument("--percentage", type=float, default=DEFAULT_TRADE_PERCENTAGE)
    simulate.add_argument("--price", type=float, default=DEFAULT_TRADE_PRICE)
    simulate.add_argument("--save", action="store_true", help="Save the deal sheet to the vault")
    simulate.add_argument("--vault-dir", dest="vault_dir")
    simulate.set_defaults(func=cmd_simulate)

    vault = subparsers.add_parser("vault", help="Saved deal sheets")
    vault_sub = vault.add_subparsers(dest="vault_command", required=True)
    vault_list = vault_sub.add_parser("list", help="List saved deals, newest first")
    vault_list.add_argument("--vault-dir", dest="vault_dir")
    vault_list.set_defaults(func=cmd_vault_list)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except DocumentRejected as e:
        print(f"Document rejected: {e.reason}", file=sys.stderr)
        return EXIT_REJECTED
    except DocumentProcessingError as e:
        print(json.dumps(e.to_dict(), indent=2), file=sys.stderr)
        return EXIT_ERROR
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
