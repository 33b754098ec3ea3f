"""CLI entry point for the whale copy-trade engine."""

import argparse
import asyncio
import json
import logging

import uvicorn
from dotenv import load_dotenv

from whalecopy.config.loader import get_config_value, load_config, load_secrets
from whalecopy.config.schema import ExecutionMode
from whalecopy.ingest.balance_oracle import BalanceFetchError
from whalecopy.pipeline.bootstrap import bootstrap, build_oracle

DEFAULT_CONFIG = "ops/configs/default.yaml"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="whalecopy",
        description="Polymarket whale copy-trade engine",
    )
    parser.add_argument(
        "--config", default=DEFAULT_CONFIG, help="Config YAML path"
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging"
    )

    sub = parser.add_subparsers(dest="command")

    # serve
    serve_p = sub.add_parser("serve", help="Run the signal channel and engine")
    serve_p.add_argument("--host", help="Bind address (overrides config)")
    serve_p.add_argument("--port", type=int, help="Port (overrides config)")
    serve_p.add_argument(
        "--dry-run", action="store_true", help="Log orders instead of placing them"
    )

    # balance
    bal_p = sub.add_parser("balance", help="Print the wallet's USDC.e balance")
    bal_p.add_argument("--address", help="Wallet address (default: PROXY_ADDRESS)")

    # config show / config get
    config_p = sub.add_parser("config", help="Config operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Display effective config")
    get_p = config_sub.add_parser("get", help="Print one config value")
    get_p.add_argument("key", help="Dotted key, e.g. breaker.threshold_usd")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    load_dotenv()

    config = load_config(args.config)

    if args.command == "serve":
        return _cmd_serve(config, args)
    elif args.command == "balance":
        return _cmd_balance(config, args)
    elif args.command == "config":
        return _cmd_config(config, args)
    else:
        parser.print_help()
        return 1


def _cmd_serve(config, args) -> int:
    from whalecopy.channel.server import create_app

    if args.dry_run:
        config = config.model_copy(
            update={"execution": config.execution.model_copy(
                update={"mode": ExecutionMode.DRY_RUN}
            )}
        )
    if config.execution.mode == ExecutionMode.LIVE:
        print("WARNING: Running in LIVE mode")
    secrets = load_secrets()
    engine = asyncio.run(bootstrap(config, secrets))
    app = create_app(engine, auth_token=secrets.auth_token)
    uvicorn.run(
        app,
        host=args.host or config.server.host,
        port=args.port or config.server.port,
        log_level="debug" if args.verbose else "info",
    )
    return 0


def _cmd_balance(config, args) -> int:
    address = args.address or load_secrets().proxy_address
    if not address:
        print("Error: pass --address or set PROXY_ADDRESS")
        return 1
    try:
        balance = asyncio.run(build_oracle(config).get_balance(address))
    except (BalanceFetchError, ValueError) as e:
        print(f"Error: {e}")
        return 1
    print(f"USDC.e balance of {address}: ${balance:.2f}")
    return 0


def _cmd_config(config, args) -> int:
    if args.config_command == "show":
        print(config.model_dump_json(indent=2))
        return 0
    elif args.config_command == "get":
        try:
            value = get_config_value(config, args.key)
        except (KeyError, IndexError, ValueError) as e:
            print(f"Error: {e}")
            return 1
        if hasattr(value, "model_dump"):
            value = value.model_dump(mode="json")
        print(json.dumps(value) if isinstance(value, (dict, list)) else value)
        return 0
    else:
        print("Use: config show | config get KEY")
        return 1
