"""
enspublish CLI: point ENS_NAME's contenthash at IPFS_CID.

  enspublish             update (no-op when already current)
  enspublish --dry-run   resolve, read and encode, but send nothing

Configuration comes from the environment, or a .env file in the current
directory (real env vars win). See enspublish.config for the variables.
Exit code 0 on success or no-op, 1 on any error.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

import structlog
from dotenv import load_dotenv

from enspublish import __version__
from enspublish.config import load_config
from enspublish.errors import ContenthashError
from enspublish.schema import UpdateState
from enspublish.updater import update_contenthash

log = structlog.get_logger(__name__)

ENV_LOG_LEVEL = "ENS_LOG_LEVEL"
ENV_LOG_JSON = "ENS_LOG_JSON"


def _load_dotenv() -> None:
    """Load .env from cwd so the run works without manual exports."""
    load_dotenv(Path.cwd() / ".env", override=False)


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """One log line per event: console key=value, or JSON with json_logs."""
    min_level = getattr(logging, (level or "INFO").upper(), logging.INFO)
    if not isinstance(min_level, int):
        min_level = logging.INFO
    processors = [
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if json_logs:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="enspublish",
        description="Update an ENS name's contenthash to an IPFS CID (EIP-1577).",
    )
    parser.add_argument("--dry-run", action="store_true", help="encode and compare, but do not send a transaction")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Returns the process exit code."""
    args = _parse_args(argv)
    _load_dotenv()
    configure_logging(
        os.getenv(ENV_LOG_LEVEL, "INFO"),
        json_logs=os.getenv(ENV_LOG_JSON, "false").lower() == "true",
    )

    try:
        config = load_config()
        result = update_contenthash(config, dry_run=args.dry_run)
    except ContenthashError as e:
        log.error("update_failed", error=str(e), error_type=type(e).__name__)
        print(f"error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return 1
    except Exception as e:
        log.exception("update_failed", error=str(e), error_type=type(e).__name__)
        print(f"error: {e}", file=sys.stderr)
        return 1

    if result.state == UpdateState.NOOP_DONE:
        print(f"✅ No-op: {result.ens_name} already points to {result.cid}")
    elif result.state == UpdateState.CONFIRMED:
        print(f"✅ {result.ens_name} now points to {result.cid} (tx {result.tx_hash}, block {result.block_number})")
    else:
        print(f"📝 Dry run: would set {result.ens_name} contenthash to {result.encoded} on resolver {result.resolver}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
