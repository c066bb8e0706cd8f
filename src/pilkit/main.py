#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import asdict
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from pilkit.app import IpClient, build_client
from pilkit.config import configure_logging
from pilkit.domain.terms import LicenseTerms
from pilkit.domain.transactions import TxOptions

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType


def _add_tx_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--wait",
        action="store_true",
        help="Wait for the transaction to be confirmed and decode its events",
    )
    parser.add_argument(
        "--encode-only",
        action="store_true",
        help="Print the unsigned transaction payload instead of submitting it",
    )


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage IP licenses and disputes")
    commands = parser.add_subparsers(dest="command", required=True)

    terms = commands.add_parser("terms", help="Show registered license terms")
    terms.add_argument("license_terms_id", type=int)

    noncom = commands.add_parser(
        "register-noncom", help="Register non-commercial social remixing terms"
    )
    _add_tx_flags(noncom)

    com_use = commands.add_parser("register-commercial-use", help="Register commercial use terms")
    com_use.add_argument("--minting-fee", type=int, required=True)
    com_use.add_argument("--currency", required=True)
    _add_tx_flags(com_use)

    com_remix = commands.add_parser(
        "register-commercial-remix", help="Register commercial remix terms"
    )
    com_remix.add_argument("--minting-fee", type=int, required=True)
    com_remix.add_argument("--rev-share", type=int, required=True, help="Percentage (0-100)")
    com_remix.add_argument("--currency", required=True)
    _add_tx_flags(com_remix)

    attach = commands.add_parser("attach", help="Attach license terms to an IP asset")
    attach.add_argument("--ip-id", required=True)
    attach.add_argument("--terms-id", type=int, required=True)
    attach.add_argument("--template")
    _add_tx_flags(attach)

    mint = commands.add_parser("mint", help="Mint license tokens")
    mint.add_argument("--licensor-ip-id", required=True)
    mint.add_argument("--terms-id", type=int, required=True)
    mint.add_argument("--template")
    mint.add_argument("--receiver")
    mint.add_argument("--amount", type=int, default=1, help="(default: %(default)s)")
    _add_tx_flags(mint)

    raise_dispute = commands.add_parser("raise-dispute", help="Raise a dispute against an IP")
    raise_dispute.add_argument("--target-ip-id", required=True)
    raise_dispute.add_argument("--arbitration-policy", required=True)
    raise_dispute.add_argument("--evidence", required=True, help="Link to dispute evidence")
    raise_dispute.add_argument("--tag", required=True, help="Dispute tag, e.g. PLAGIARISM")
    _add_tx_flags(raise_dispute)

    cancel_dispute = commands.add_parser("cancel-dispute", help="Cancel a raised dispute")
    cancel_dispute.add_argument("--dispute-id", type=int, required=True)
    _add_tx_flags(cancel_dispute)

    return parser.parse_args(list(argv))


def _tx_options(args: argparse.Namespace) -> TxOptions:
    return TxOptions(
        wait_for_transaction=getattr(args, "wait", False),
        encoded_tx_data_only=getattr(args, "encode_only", False),
    )


async def _dispatch(client: IpClient, args: argparse.Namespace) -> object:
    options = _tx_options(args)
    match args.command:
        case "terms":
            return await client.license.get_license_terms(args.license_terms_id)
        case "register-noncom":
            return await client.license.register_non_com_social_remixing_pil(options)
        case "register-commercial-use":
            return await client.license.register_commercial_use_pil(
                default_minting_fee=args.minting_fee,
                currency=args.currency,
                tx_options=options,
            )
        case "register-commercial-remix":
            return await client.license.register_commercial_remix_pil(
                default_minting_fee=args.minting_fee,
                commercial_rev_share=args.rev_share,
                currency=args.currency,
                tx_options=options,
            )
        case "attach":
            return await client.license.attach_license_terms(
                ip_id=args.ip_id,
                license_terms_id=args.terms_id,
                license_template=args.template,
                tx_options=options,
            )
        case "mint":
            return await client.license.mint_license_tokens(
                licensor_ip_id=args.licensor_ip_id,
                license_terms_id=args.terms_id,
                license_template=args.template,
                receiver=args.receiver,
                amount=args.amount,
                tx_options=options,
            )
        case "raise-dispute":
            return await client.dispute.raise_dispute(
                target_ip_id=args.target_ip_id,
                arbitration_policy=args.arbitration_policy,
                link_to_dispute_evidence=args.evidence,
                target_tag=args.tag,
                tx_options=options,
            )
        case "cancel-dispute":
            return await client.dispute.cancel_dispute(
                dispute_id=args.dispute_id, tx_options=options
            )
        case _:
            raise ValueError(f"Unknown command: {args.command}")


async def _run_command(args: argparse.Namespace) -> object:
    async with build_client() as client:
        return await _dispatch(client, args)


def _summarize(result: object) -> dict[str, object]:
    if isinstance(result, LicenseTerms):
        return asdict(result)
    summary: dict[str, object] = {}
    for name in ("license_terms_id", "success", "license_token_ids", "dispute_id", "tx_hash"):
        if hasattr(result, name):
            summary[name] = getattr(result, name)
    encoded = getattr(result, "encoded_tx_data", None)
    if encoded is not None:
        summary["encoded_tx_data"] = {"to": encoded.to, "data": encoded.data}
    return summary


def _to_json(value: object) -> object:
    if isinstance(value, bytes):
        return "0x" + value.hex()
    return str(value)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args = _parse_args(sys.argv[1:] if argv is None else argv)

    try:
        result = asyncio.run(_run_command(parsed_args))
    except Exception as e:  # noqa: BLE001
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(_summarize(result), indent=2, default=_to_json))


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    print("\nClosed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    configure_logging()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
