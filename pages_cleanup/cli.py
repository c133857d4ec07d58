#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Cloudflare Pages cleanup entry point.

Usage:
  pages-cleanup [--action deployments|disable-access|remove-access] [options]

Exit codes:
  0 - Success
  1 - Config or API fetch failure
  2 - Deletion failures occurred
"""

import argparse
import logging
import sys
import typing as t

from .access import disable_access, remove_access
from .client import ApiError, CloudflareClient
from .config import (
    ACTION_DEPLOYMENTS,
    ACTION_DISABLE_ACCESS,
    ACTIONS,
    RunConfig,
    check_config,
)
from .deployments import cleanup_deployments

logger = logging.getLogger("pages_cleanup")


def setup_logging(verbose: bool = False) -> None:
    """Plain stdout logging for CI visibility."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)-7s %(message)s",
        stream=sys.stdout,
    )
    # urllib3 connection chatter drowns out [http] lines at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pages-cleanup",
        description="Delete Cloudflare Pages deployments (keeping production) or clear Access apps for a project.",
    )
    parser.add_argument("--api-token", help="API token (default: $CF_API_TOKEN)")
    parser.add_argument("--account-id", help="Account ID (default: $CF_ACCOUNT_ID)")
    parser.add_argument("--project", dest="project_name", help="Pages project name (default: $CF_PAGES_PROJECT)")
    parser.add_argument("--action", choices=ACTIONS, default=ACTION_DEPLOYMENTS)
    parser.add_argument("--per-page", type=int, help="Deployments per listing page")
    parser.add_argument("--batch-pages", type=int, help="Listing pages gathered per delete sweep")
    parser.add_argument("--max-retries", type=int, help="Attempts per API call")
    parser.add_argument("--timeout", type=float, help="HTTP timeout in seconds")
    parser.add_argument("--delete-aliased", action="store_true", default=None,
                        help="Also delete aliased (branch) deployments with force=true")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def config_from_args(args: argparse.Namespace, environ: t.Optional[t.Mapping[str, str]] = None) -> RunConfig:
    return RunConfig.from_env(
        environ,
        api_token=args.api_token,
        account_id=args.account_id,
        project_name=args.project_name,
        action=args.action,
        per_page=args.per_page,
        batch_pages=args.batch_pages,
        max_retries=args.max_retries,
        timeout=args.timeout,
        delete_aliased=args.delete_aliased,
    )


def run(config: RunConfig, client: t.Optional[CloudflareClient] = None) -> int:
    """Run the configured action and map its outcome to an exit code."""
    client = client or CloudflareClient(config)

    if config.action == ACTION_DEPLOYMENTS:
        try:
            logger.info("[run] Starting cleanup loop…")
            summary = cleanup_deployments(client)
        except ApiError as e:
            logger.error(f"[run] Fatal error during cleanup: {e}")
            return 1
        message = (
            f"Deleted={summary.deleted}, Skipped={summary.skipped}, Failed={summary.failed}, "
            f"Sweeps={summary.sweeps}. Kept id={summary.production_id}"
        )
        if summary.failed:
            logger.warning(f"[run] Cleanup finished with some failures. {message}")
            return 2
        logger.info(f"[run] Cleanup complete. {message}")
        return 0

    strategy = disable_access if config.action == ACTION_DISABLE_ACCESS else remove_access
    try:
        logger.info(f"[run] Starting Access {config.action} for project {config.project_name}…")
        changed = strategy(client)
    except ApiError as e:
        logger.error(f"[run] Fatal error during Access cleanup: {e}")
        return 1
    if changed:
        logger.info("[run] Access changes applied.")
    else:
        logger.info("[run] No Access changes were needed.")
    return 0


def main(argv: t.Optional[t.Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        logger.info("[init] Validating configuration…")
        config = config_from_args(args)
        check_config(config)
        logger.info("[init] Configuration OK.")
    except SystemExit:
        # Already logged actionable config errors
        return 1

    try:
        return run(config)
    finally:
        logger.info("[done] Exiting Cloudflare Pages cleanup.")


if __name__ == "__main__":
    sys.exit(main())
