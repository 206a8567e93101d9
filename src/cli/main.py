from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional, Sequence

from core.config import get_settings
from core.logging import get_logger
from monitoring.prometheus_exporter import generate_prometheus_text
from providers.fpl import FplClient, FplClientError, TeamNotFoundError

log = get_logger("cli")

CLI_NAME = "FPL CLI"
CLI_VERSION = "v0.0.1"
DEFAULT_LIMIT = 5


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="fpl", description="Client a riga di comando per l'API Fantasy Premier League")
    ap.add_argument("--version", action="version", version=f"{CLI_NAME} {CLI_VERSION}")
    ap.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="timeout complessivo della richiesta in secondi (default: FPL_REQUEST_TIMEOUT_TOTAL)",
    )
    ap.add_argument("--metrics", action="store_true", help="stampa le metriche Prometheus su stderr a fine comando")

    sub = ap.add_subparsers(dest="command", required=True)
    sub.add_parser("hello", help="messaggio di benvenuto")

    fx = sub.add_parser("fixtures", help="prossime fixtures, opzionalmente filtrate per squadra")
    fx.add_argument("-t", "--team", type=str, default=None, help="nome squadra (case-insensitive)")
    fx.add_argument("-l", "--limit", type=int, default=DEFAULT_LIMIT, help=f"numero massimo di fixtures (default {DEFAULT_LIMIT})")
    fx.add_argument("-r", "--refresh", action="store_true", help="forza il refresh del dataset bootstrap")
    return ap


def _cmd_hello() -> int:
    print(f"Welcome to the {CLI_NAME}")
    return 0


def _cmd_fixtures(client: FplClient, args: argparse.Namespace, timeout: Optional[float]) -> int:
    fixtures = client.get_fixtures(team=args.team, limit=args.limit, refresh=args.refresh, timeout=timeout)
    payload: List[dict] = [f.model_dump(mode="json") for f in fixtures]
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


def _print_metrics(enabled: bool) -> None:
    if enabled:
        sys.stderr.write(generate_prometheus_text().decode("utf-8"))


def main(argv: Optional[Sequence[str]] = None, client: Optional[FplClient] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "hello":
        code = _cmd_hello()
        _print_metrics(args.metrics)
        return code

    try:
        settings = get_settings()
    except ValueError as e:
        print(f"Config non valida: {e}", file=sys.stderr)
        return 1
    timeout = args.timeout if args.timeout is not None else settings.request_timeout_total

    own_client = client is None
    client = client or FplClient(settings)
    try:
        return _cmd_fixtures(client, args, timeout)
    except TeamNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except FplClientError as e:
        log.error("fixtures_failed %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        _print_metrics(args.metrics)
        if own_client:
            client.close()


if __name__ == "__main__":
    sys.exit(main())
