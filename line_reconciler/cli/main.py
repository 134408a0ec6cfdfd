"""CLI for recomputing stored transactions."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from ..config import (
    get_app_version,
    get_log_level,
    get_profile,
    list_available_profiles,
    set_profile,
)
from ..config.profile_loader import ProfileConfig
from ..export.excel_export import export_document_to_excel
from ..export.payload import build_transaction_payload, sanitize_for_json
from ..pipeline.session import EditingSession

logger = logging.getLogger(__name__)


class TransactionLoadError(Exception):
    """Raised when a transaction file cannot be read or parsed."""
    pass


def load_transaction_file(path: str) -> Dict[str, Any]:
    """Read a transaction JSON file.

    Raises:
        TransactionLoadError: If the file is missing, not JSON, or not an object
    """
    file_path = Path(path)
    if not file_path.exists():
        raise TransactionLoadError(f"Input file not found: {file_path}")
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise TransactionLoadError(f"Could not read {file_path}: {e}") from e
    if not isinstance(data, dict):
        raise TransactionLoadError(f"{file_path} must contain a JSON object")
    return data


def process_transaction(
    data: Mapping[str, Any],
    tax_enabled: Optional[bool] = None,
    profile: Optional[ProfileConfig] = None,
    excel_path: Optional[str] = None
) -> Dict[str, Any]:
    """Reconcile and aggregate one stored transaction.

    Args:
        data: Transaction mapping; may carry "editSources" (line index -> field)
        tax_enabled: Override for the tax switch (None: from the transaction)
        profile: Profile for line defaults (None: active profile)
        excel_path: Optional path for an Excel export

    Returns:
        Dict with:
        - status: "OK" or "FAILED"
        - line_count: Number of lines
        - totals: subTotal/taxAmount/invoiceTotal
        - payload: Body for the persistence API
        - excel_path: Path of the export, if requested
        - error: Error message if failed
    """
    session = EditingSession(profile=profile or get_profile())
    edit_sources = data.get("editSources") or {}
    try:
        session.load_transaction(data, tax_enabled=tax_enabled, edit_sources=edit_sources)
    except (ValueError, IndexError) as e:
        logger.error(f"Transaction rejected: {e}")
        return {"status": "FAILED", "line_count": 0, "error": str(e)}

    result: Dict[str, Any] = {
        "status": "OK",
        "line_count": len(session.lines),
        "tax_enabled": session.tax_enabled,
        "totals": sanitize_for_json(session.totals.to_dict()),
        "payload": build_transaction_payload(session.document),
        "error": None,
    }
    if excel_path:
        result["excel_path"] = export_document_to_excel(session.document, excel_path)
    return result


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Recompute GST line amounts and totals for a stored transaction"
    )

    parser.add_argument(
        "--input",
        required=True,
        help="Transaction JSON file (items, or products/services)"
    )

    parser.add_argument(
        "--output",
        required=False,
        help="Write the payload JSON here (default: stdout)"
    )

    parser.add_argument(
        "--excel",
        required=False,
        help="Also export lines and totals to this .xlsx file"
    )

    tax_group = parser.add_mutually_exclusive_group()
    tax_group.add_argument(
        "--tax-enabled",
        dest="tax_enabled",
        action="store_const",
        const=True,
        help="Force tax on (default: from taxEnabled or the company's GST number)"
    )
    tax_group.add_argument(
        "--no-tax",
        dest="tax_enabled",
        action="store_const",
        const=False,
        help="Force tax off"
    )

    parser.add_argument(
        "--profile",
        type=str,
        default="default",
        help="Configuration profile name (default: default)"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose debug output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {get_app_version()}"
    )

    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else getattr(logging, get_log_level())
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    try:
        profile = set_profile(args.profile)
    except FileNotFoundError:
        logger.warning(
            f"Profile '{args.profile}' not found (available: "
            f"{', '.join(list_available_profiles())}), using defaults"
        )
        profile = get_profile()
    except ValueError as e:
        logger.error(str(e))
        return 1

    try:
        data = load_transaction_file(args.input)
    except TransactionLoadError as e:
        logger.error(str(e))
        return 1

    result = process_transaction(
        data,
        tax_enabled=args.tax_enabled,
        profile=profile,
        excel_path=args.excel,
    )
    if result["status"] == "FAILED":
        return 1

    output = json.dumps(result["payload"], indent=2, ensure_ascii=False)
    if args.output:
        Path(args.output).write_text(output + "\n", encoding="utf-8")
        logger.info(f"Payload written to {args.output}")
    else:
        sys.stdout.write(output + "\n")

    totals = result["totals"]
    logger.info(
        f"{result['line_count']} line(s): subTotal={totals['subTotal']:.2f} "
        f"taxAmount={totals['taxAmount']:.2f} invoiceTotal={totals['invoiceTotal']:.2f}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
