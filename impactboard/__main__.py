#!/usr/bin/env python3
"""Render an organization README from a policy and a statistics snapshot.

Reads the README (or template), the org's ``impactboard.yml`` and a JSON
statistics snapshot, then writes the result for the policy's mode:

  full         placeholders resolved against the snapshot
  template     a generated leaderboard README
  assets-only  the input unchanged
"""

import argparse
import asyncio
import logging
import sys

from impactboard.config import POLICY_FILE_NAME, PolicyError, load_policy
from impactboard.providers import SnapshotProvider
from impactboard.resolver import render_readme
from impactboard.stats_data import AssetContext


def _parse_assets(values):
    """Turn repeated ``key=path`` arguments into a dict."""
    assets = {}
    for value in values or []:
        key, sep, path = value.partition("=")
        if not sep or not key.strip() or not path.strip():
            raise ValueError(f"invalid --asset '{value}'; expected key=path")
        assets[key.strip().lower()] = path.strip()
    return assets


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="impactboard",
        description="Render an organization README with ImpactBoard statistics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Output goes to stdout unless --output is given.",
    )
    parser.add_argument("readme", help="README or template file containing placeholders")
    parser.add_argument(
        "--policy", dest="policy_path", default=POLICY_FILE_NAME,
        help="path to the policy file (default: %(default)s)",
    )
    parser.add_argument("--stats", dest="stats_path", required=True, help="path to a JSON statistics snapshot")
    parser.add_argument("--org-id", dest="org_id", type=int, required=True, help="numeric organization id")
    parser.add_argument("--org-login", dest="org_login", required=True, help="organization login, used for asset URLs")
    parser.add_argument("--installation-id", dest="installation_id", type=int, default=0, help="app installation id (default: %(default)s)")
    parser.add_argument(
        "--asset", dest="assets", action="append", default=[], metavar="KEY=PATH",
        help="written SVG asset, e.g. leaderboard=assets/impactboard/leaderboard.svg (repeatable)",
    )
    parser.add_argument("--branch", default="HEAD", help="branch of the .github repo holding assets (default: %(default)s)")
    parser.add_argument("--output", default=None, help="write the result to this file instead of stdout")
    parser.add_argument("--verbose", action="store_true", default=False, help="log resolution details to stderr")
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(name)s: %(message)s",
            stream=sys.stderr,
        )

    try:
        policy = load_policy(args.policy_path)
    except PolicyError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    if policy is None:
        print(f"Error: policy file not found: {args.policy_path}", file=sys.stderr)
        sys.exit(1)

    try:
        assets = _parse_assets(args.assets)
        provider = SnapshotProvider.from_file(args.stats_path)
        with open(args.readme, "r", encoding="utf-8") as f:
            text = f.read()
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    asset_context = AssetContext(args.org_login, assets, branch=args.branch) if assets else None

    output = asyncio.run(render_readme(
        args.org_id,
        args.installation_id,
        args.org_login,
        text,
        policy,
        provider,
        provider,
        asset_context,
    ))

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(output)
        print(f"README written to {args.output}", file=sys.stderr)
    else:
        print(output)


if __name__ == "__main__":
    main()
