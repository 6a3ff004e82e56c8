#!/usr/bin/env python3
"""
LBC Command Line Interface

Usage:
    lbc-client send [--rpc URL] --name NAME
    lbc-client send [--rpc URL] --beneficiary-name NAME
    lbc-client send [--rpc URL] --text TXT --due DATE --beneficiary-id ID
                    [--parent-id ID] --commitment-due DATE
    lbc-client get  [--rpc URL] (--path PATH | --list ALIAS) [--data BYTES]
                    [--height H] [--raw-json | --value]
    lbc-client whoami
"""

import argparse
import json
import sys
from typing import List, Optional

from .client import CreatePromiseArgs, LbcClient
from .config import ClientConfig
from .errors import LbcClientError
from .logging_config import configure_logging
from .query import ALIASES


def cmd_send(client: LbcClient, args) -> int:
    """Submit one transaction, chosen by which option is non-empty."""
    if args.name:
        receipt = client.register_commiter(args.name)
        print(f"✓ Commiter registered: {receipt.ids['commiter_id']}")
    elif args.beneficiary_name:
        receipt = client.create_beneficiary(args.beneficiary_name)
        print(f"✓ Beneficiary created: {receipt.ids['beneficiary_id']}")
    else:
        if not (args.text and args.due and args.beneficiary_id and args.commitment_due):
            print(
                "✗ For promise+commitment you must pass --text, --due, --beneficiary-id, --commitment-due",
                file=sys.stderr
            )
            return 1
        receipt = client.create_promise_and_commit(CreatePromiseArgs(
            text=args.text,
            due=args.due,
            beneficiary_id=args.beneficiary_id,
            commitment_due=args.commitment_due,
            parent_promise_id=args.parent_id,
        ))
        print("✓ Promise+Commitment created atomically")
        print(f"  promise:    {receipt.ids['promise_id']}")
        print(f"  commitment: {receipt.ids['commitment_id']}")

    print(f"  tx hash: {receipt.tx_hash}", file=sys.stderr)
    return 0


def cmd_get(client: LbcClient, args) -> int:
    """Query the ledger and print the raw response or the decoded value."""
    data = args.data.encode('utf-8') if args.data else None
    view = client.query(path=args.path, alias=args.list, data=data, height=args.height)

    if args.raw_json:
        print(json.dumps(view.raw, indent=2, ensure_ascii=False))
    else:
        print(view.decoded.render())

    if not view.ok:
        print(f"✗ Query failed (code {view.code}): {view.log}", file=sys.stderr)
        return 1
    return 0


def cmd_whoami(client: LbcClient, args) -> int:
    print(client.whoami())
    return 0


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--rpc", help="JSON-RPC endpoint URL (default: $LBC_RPC_URL or http://localhost:26657)")
    common.add_argument("--config-dir", help="Key material directory (default: $LBC_CONFIG_DIR or ./config)")
    common.add_argument("--timeout", type=float, help="Request timeout in seconds")
    common.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR")
    common.add_argument("--log-json", action="store_true", default=None, help="Structured JSON logs on stderr")
    common.add_argument("--log-file", help="Also append logs to this file (default: $LBC_LOG_FILE)")

    parser = argparse.ArgumentParser(
        prog="lbc-client",
        description="Signed-transaction client for the LBC ledger",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  lbc-client send --name Alice
  lbc-client send --beneficiary-name "City Library"
  lbc-client send --text "Return the books" --due 2030-01-01 \\
                  --beneficiary-id beneficiary:... --commitment-due 2030-01-01
  lbc-client get --list promise
  lbc-client get --path /list/commitment --raw-json
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # send
    send_parser = subparsers.add_parser("send", parents=[common], help="Submit a signed transaction")
    send_parser.add_argument("--name", default="", help="Register commiter with this name")
    send_parser.add_argument("--beneficiary-name", default="", help="Create beneficiary with this name")
    send_parser.add_argument("--text", default="", help="Promise text (required for promise)")
    send_parser.add_argument("--due", default="", help="Promise due (YYYY-MM-DD or RFC3339)")
    send_parser.add_argument("--beneficiary-id", default="", help="Beneficiary ID (required for promise)")
    send_parser.add_argument("--parent-id", default="", help="Optional parent promise ID")
    send_parser.add_argument("--commitment-due", default="", help="Commitment due (YYYY-MM-DD or RFC3339)")

    # get
    get_parser = subparsers.add_parser("get", parents=[common], help="Query the ledger")
    get_parser.add_argument("--path", default="", help="ABCI path (e.g. /list/promise)")
    get_parser.add_argument("--list", default="", help=f"Entity alias: {' | '.join(ALIASES)}")
    get_parser.add_argument("--data", default="", help="Optional key/arg (sent as base64)")
    get_parser.add_argument("--height", default="", help="Block height")
    mode = get_parser.add_mutually_exclusive_group()
    mode.add_argument("--raw-json", action="store_true", help="Print raw abci_query JSON")
    mode.add_argument("--value", action="store_true", help="Decode response value (default)")

    # whoami
    subparsers.add_parser("whoami", parents=[common], help="Print the local commiter id")

    return parser


COMMANDS = {
    "send": cmd_send,
    "get": cmd_get,
    "whoami": cmd_whoami,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        config = ClientConfig.from_env(
            rpc_url=args.rpc,
            config_dir=args.config_dir,
            timeout=args.timeout,
            log_level=args.log_level,
            log_json=args.log_json,
            log_file=args.log_file,
        )
        configure_logging(config.log_level, json_format=config.log_json, log_file=config.log_file)
        with LbcClient(config) as client:
            return handler(client, args)
    except LbcClientError as e:
        print(f"✗ Error: {e.describe()}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"✗ Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
