from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from .da_client import DEFAULT_PREFIX, DirectApiClient
from .models import Config, Failure
from .utils import parse_param


def setup_logging(log_directory: Optional[Path], verbose: bool = False) -> Optional[Path]:
    from datetime import datetime, timezone

    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    for h in list(logger.handlers):
        logger.removeHandler(h)

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(threadName)s | %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )

    # stdout carries the result, logs go to stderr
    ch = logging.StreamHandler(sys.stderr)
    ch.setFormatter(formatter)
    logger.addHandler(ch)

    if log_directory is None:
        return None
    log_directory.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    log_file = log_directory / f"call-{timestamp}.log"
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setFormatter(formatter)
    logger.addHandler(fh)
    logging.info("Logging initialized. File: %s", str(log_file))
    return log_file


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="directapi",
        description="Call a DirectAdmin API command and print the decoded result as JSON.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--config", default="directadmin.json", help="Path to JSON config file with host, usernames and password")
    parser.add_argument("--login-as", required=False, help="Act as this user for the call (admin|user impersonation)")
    parser.add_argument("--prefix", default=DEFAULT_PREFIX, help="Command prefix, e.g. /CMD_PLUGINS/ for plugin APIs")
    parser.add_argument("--log-dir", required=False, help="Also write logs to a timestamped file in this directory")
    parser.add_argument("--verbose", action="store_true", help="Log each request at DEBUG level")
    parser.add_argument("method", choices=["get", "post"], help="HTTP method")
    parser.add_argument("command", help="API command without prefix, e.g. SHOW_DOMAINS")
    parser.add_argument(
        "-p", "--param", action="append", default=[], metavar="KEY=VALUE",
        help="Request parameter; repeatable. Use |password| to send the configured password",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(Path(args.log_dir) if args.log_dir else None, verbose=bool(args.verbose))

    params: Dict[str, str] = {}
    try:
        for raw in args.param:
            key, value = parse_param(raw)
            params[key] = value
    except ValueError as exc:
        logging.error("Invalid parameter: %s", exc)
        return 2

    config_path = Path(args.config)
    if not config_path.exists():
        logging.error("Config not found: %s", str(config_path))
        return 2
    try:
        config = Config.from_json_file(config_path)
    except (OSError, ValueError) as exc:
        logging.error("Invalid config: %s", exc)
        return 2

    with DirectApiClient.from_config(config) as api:
        if args.login_as:
            api.login_as(str(args.login_as))
        if args.method == "post":
            result = api.post_api(args.command, params, prefix=args.prefix)
        else:
            result = api.get_api(args.command, params or None, prefix=args.prefix)

    if isinstance(result, Failure):
        logging.error("[da] %s %s%s did not return API data", args.method.upper(), args.prefix, args.command)
        return 3

    json.dump(result.data, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
