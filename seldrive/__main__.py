"""CLI for selection actions: python -m seldrive"""

from __future__ import annotations

import argparse
import os
import sys
import time

import seldrive
from seldrive.actions import VALID_ACTIONS
from seldrive.errors import SeldriveError
from seldrive.selector import SELECTOR_KINDS


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="seldrive: apply an action to every element matching a selector"
    )
    parser.add_argument("action", choices=sorted(VALID_ACTIONS), help="Action to perform")
    parser.add_argument("selector", help="Selector expression")
    parser.add_argument(
        "--using",
        type=str,
        default="css",
        choices=sorted(SELECTOR_KINDS),
        help="Selector type (default: css)",
    )
    parser.add_argument("--value", type=str, default=None, help="Text for fill or select")
    parser.add_argument(
        "--cdp-port", type=int, default=None, help="CDP port (default: 9222)"
    )
    parser.add_argument(
        "--cdp-host", type=str, default=None, help="CDP host (default: 127.0.0.1)"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print diagnostics (selection, match count, timing)",
    )
    args = parser.parse_args(argv)

    # Pass CDP connection args via env vars for the client
    if args.cdp_port:
        os.environ["SELDRIVE_CDP_PORT"] = str(args.cdp_port)
    if args.cdp_host:
        os.environ["SELDRIVE_CDP_HOST"] = args.cdp_host

    from seldrive.platforms.cdp import CDPClient

    params = {}
    if args.value is not None:
        params["value"] = args.value

    try:
        client = CDPClient()
        client.connect()
    except SeldriveError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    try:
        page = seldrive.Page(client)
        selection = page.query(args.selector, args.using)

        if args.verbose:
            print(f"=== seldrive {args.action} ===")
            print(f"Selection: {selection}")
            try:
                print(f"Matches: {selection.count()}")
            except SeldriveError as exc:
                print(f"Matches: unknown ({exc})")

        t0 = time.perf_counter()
        result = page.execute(selection, args.action, **params)
        elapsed = (time.perf_counter() - t0) * 1000
    finally:
        client.close()

    if not result.success:
        print(f"Error: {result.error}", file=sys.stderr)
        return 1

    print(result.message)
    if args.verbose:
        print(f"Completed in {elapsed:.1f} ms")
    return 0


if __name__ == "__main__":
    sys.exit(main())
