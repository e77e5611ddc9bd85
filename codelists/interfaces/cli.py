"""
interfaces/cli.py
──────────────────────────────────────────────────────────────────────────────
Command-line interface for classification lookups.

Usage:
  # All codes of classification 6 (NACE) valid today, bokmål labels
  python -m codelists.interfaces.cli --id 6

  # Level 1 only, English labels (falls back to nb if en is missing)
  python -m codelists.interfaces.cli --id 6 --level 1 --language en

  # Correspondence table 6 → 91, one row per source code with target names
  python -m codelists.interfaces.cli --id 6 --target 91 --concate 1

  # JSON output
  python -m codelists.interfaces.cli --id 131 --date 2024-01-01 --json

  # Via installed entry-point (pyproject.toml [project.scripts])
  codelists-classify --id 131

Exit codes:
  0: lookup completed (an empty result is not an error)
  1: fatal error (configuration)
  2: argument error
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date

from codelists.domain.models import ClassificationCodes, ClassificationQueryParams
from codelists.services.container import get_classifications_client

logger = logging.getLogger(__name__)


# ── Argument parser ────────────────────────────────────────────────────────

def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from exc


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="codelists-classify",
        description="Fetch codes of an SSB classification, variant or correspondence table.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument(
        "--id", "-i",
        type=int,
        required=True,
        dest="classification_id",
        help="Classification id.",
    )
    p.add_argument(
        "--language", "-l",
        default="nb",
        help="Label language: nb, nn or en. (default: nb)",
    )
    p.add_argument(
        "--date", "-d",
        type=_parse_date,
        dest="at_date",
        help="Validity date YYYY-MM-DD. (default: today)",
    )
    p.add_argument("--level", default="", help="Hierarchy level. (default: all)")
    p.add_argument("--variant", default="", help="Variant name.")
    p.add_argument(
        "--select-codes",
        default="",
        dest="select_codes",
        help="Code pattern limiting the result, e.g. '01*'.",
    )
    p.add_argument(
        "--target", "-t",
        default="",
        dest="target_classification_id",
        help="Target classification id; returns a correspondence table.",
    )
    p.add_argument(
        "--concate",
        choices=["", "1", "2"],
        default="",
        dest="concate_children",
        help="Correspondence grouping: '' none, 1 notes, 2 merged name. (default: '')",
    )
    p.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output results as JSON.",
    )
    p.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging.",
    )
    return p


# ── Formatting helpers ─────────────────────────────────────────────────────

def _print_codes_text(params: ClassificationQueryParams, codes: ClassificationCodes) -> None:
    """Pretty-print codes to stdout."""
    print(f"\n{'─' * 60}")
    print(f"Classification : {params.classification_id}  |  Language: {params.language}")
    if params.target_classification_id:
        print(f"Corresponds to : {params.target_classification_id}")
    print(f"Codes          : {len(codes.codes)}")
    print(f"{'─' * 60}")
    for c in codes.codes:
        indent = "  " * max(int(c.level) - 1, 0) if c.level.isdigit() else ""
        print(f"  {indent}[{c.code}] {c.name}")
        if c.notes:
            print(f"  {indent}     Notes: {c.notes}")
    print()


def _print_codes_json(params: ClassificationQueryParams, codes: ClassificationCodes) -> None:
    """Print codes as JSON to stdout."""
    print(json.dumps(codes.to_dict(), indent=2, ensure_ascii=False))


# ── Main logic ─────────────────────────────────────────────────────────────

def run(args: argparse.Namespace) -> int:
    """Execute one lookup for the given arguments.

    Returns:
        Exit code (0 = completed, 1 = error).
    """
    params = ClassificationQueryParams(
        classification_id=args.classification_id,
        language=args.language,
        at_date=args.at_date,
        level=args.level,
        variant=args.variant,
        select_codes=args.select_codes,
        target_classification_id=args.target_classification_id,
        concate_children=args.concate_children,
    )
    printer = _print_codes_json if args.json_output else _print_codes_text

    try:
        client = get_classifications_client()
    except Exception as exc:
        logger.exception("Failed to initialise classifications client")
        print(f"ERROR: Client initialisation failed: {exc}", file=sys.stderr)
        return 1

    outcome = client.fetch(params)
    if outcome.failure is not None:
        print(
            f"No codes returned for classification {params.classification_id} "
            f"({outcome.failure.value})",
            file=sys.stderr,
        )
    elif outcome.used_fallback:
        print(
            f"Note: labels not available in {params.language!r}; "
            f"showing {outcome.language!r}",
            file=sys.stderr,
        )
    printer(params, outcome.codes)
    return 0


def main() -> None:
    """Entry point for the codelists-classify console script."""
    parser = _build_parser()
    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    sys.exit(run(args))


if __name__ == "__main__":
    main()
