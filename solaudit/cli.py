"""
solaudit — Command-line entry point.

Usage:
    solaudit --program <address> [--cluster devnet] [--tx <base64>] [--output text|json]

Without --tx the account is compared with itself, which reports whether it
exists and what it looks like. With --tx the transaction is simulated (never
submitted) and the simulated post-state is compared with the current state.

Exit status: 0 on a completed analysis, 2 on invalid input, 1 on any other
failure (transport, missing account in --strict mode, malformed response).
"""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence

import structlog
from dotenv import load_dotenv
from pydantic import ValidationError

from solaudit import __version__
from solaudit.analysis.engine import RetrySafetyAnalyzer
from solaudit.clients.rpc import SolanaRpcClient
from solaudit.config import (
    Cluster,
    LoggingConfig,
    SolauditConfig,
    load_config,
    parse_cluster,
)
from solaudit.errors import InvalidInputError, SolauditError
from solaudit.report.writer import render
from solaudit.telemetry.logging import setup_logging

logger = structlog.get_logger(system="solaudit.cli")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID_INPUT = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="solaudit",
        description="Solana audit and retry-safety tool",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--program", required=True, help="Program or account address to analyse")
    parser.add_argument(
        "--cluster",
        default=None,
        help=f"Target cluster ({', '.join(c.value for c in Cluster)}; default devnet)",
    )
    parser.add_argument(
        "--tx",
        default=None,
        help="Base64-encoded transaction to simulate against the account",
    )
    parser.add_argument(
        "--output",
        default="text",
        choices=("text", "json"),
        help="Report format (default text)",
    )
    parser.add_argument("--config", default=None, help="Optional YAML config file")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail if the account does not exist instead of comparing a default snapshot",
    )
    return parser


async def run(args: argparse.Namespace, config: SolauditConfig) -> str:
    """Run one analysis and return the rendered report."""
    async with SolanaRpcClient(config.rpc) as rpc:
        analyzer = RetrySafetyAnalyzer(rpc, cluster=config.rpc.cluster.value)
        result = await analyzer.analyse_account(
            args.program,
            args.tx,
            allow_missing=not args.strict,
        )
    return render(result, args.output)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    load_dotenv()
    setup_logging(LoggingConfig())

    try:
        config = load_config(args.config)
        if args.cluster is not None:
            config.rpc.cluster = parse_cluster(args.cluster)
        setup_logging(config.logging)
        report = asyncio.run(run(args, config))
    except ValidationError as exc:
        logger.error("invalid_config", error=str(exc))
        return EXIT_INVALID_INPUT
    except InvalidInputError as exc:
        logger.error("invalid_input", field=exc.field, error=str(exc))
        return EXIT_INVALID_INPUT
    except SolauditError as exc:
        logger.error("analysis_failed", error_type=type(exc).__name__, error=str(exc))
        return EXIT_FAILURE

    print(report)
    return EXIT_OK
