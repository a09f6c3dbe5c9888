"""Command line interface for the project.

Commands:
- show-settings: print the resolved Settings
- build: estimate one precision graph and save edges/colours/summary
- sweep: evaluate a grid of (shrinkage, quantile) pairs
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Iterable

from pydantic import ValidationError

from precision_graph.config import (
    ConfigError,
    NetworkConfig,
    Settings,
    SweepConfig,
    configure_logging,
    get_settings,
    load_config,
)
from precision_graph.errors import PrecisionGraphError, SingularMatrixError
from precision_graph.pipeline import run_network, run_sweep

__all__ = ["build_parser", "main"]

EXIT_INPUT_ERROR = 2
EXIT_SINGULAR = 3
EXIT_PIPELINE_ERROR = 4


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="precision_graph CLI")
    parser.add_argument(
        "--structured-logs",
        dest="structured_logs",
        action="store_true",
        help="força logs estruturados em JSON",
    )
    parser.add_argument(
        "--plain-logs",
        dest="structured_logs",
        action="store_false",
        help="força logs texto simples",
    )
    parser.set_defaults(structured_logs=None)

    subparsers = parser.add_subparsers(dest="command", required=True)

    show = subparsers.add_parser("show-settings", help="Exibe as Settings resolvidas")
    show.add_argument("--json", action="store_true", help="Formato JSON")

    build = subparsers.add_parser("build", help="Estima o grafo de precisão esparso")
    build.add_argument("--config", type=str, help="Arquivo de configuração YAML")
    source = build.add_mutually_exclusive_group()
    source.add_argument("--returns", type=str, help="Arquivo com a matriz de retornos")
    source.add_argument("--prices", type=str, help="Arquivo de preços (convertidos em log-retornos)")
    build.add_argument("--sectors", type=str, help="CSV symbol,sector para colorir vértices")
    build.add_argument(
        "--intensity",
        type=str,
        help="Intensidade de shrinkage em [0, 1] ou 'auto' (Ledoit-Wolf)",
    )
    build.add_argument("--quantile", type=float, help="Quantil de corte de |P| em [0, 1]")
    build.add_argument("--window", type=int, help="Usa apenas as últimas N observações")
    build.add_argument("--output-dir", type=str, help="Diretório para salvar resultados")
    build.add_argument("--json", action="store_true", help="Mostra resultado em JSON")

    sweep = subparsers.add_parser("sweep", help="Grid de (shrinkage, quantil)")
    sweep.add_argument("--config", type=str, help="Arquivo de configuração YAML")
    sweep.add_argument("--returns", type=str, help="Arquivo com a matriz de retornos")
    sweep.add_argument("--intensities", type=float, nargs="+", help="Intensidades de shrinkage")
    sweep.add_argument("--quantiles", type=float, nargs="+", help="Quantis de corte")
    sweep.add_argument("--workers", type=int, help="Número de threads")
    sweep.add_argument("--output", type=str, help="CSV de saída do resumo")

    return parser


def _configure_logging(structured: bool | None, settings: Settings, command: str) -> None:
    configure_logging(settings=settings, structured=structured, context={"command": command})


def _print_payload(payload: dict[str, Any], *, as_json: bool) -> None:
    if as_json:
        print(json.dumps(payload, indent=2, sort_keys=True, default=str))
    else:
        for key, value in payload.items():
            print(f"{key}: {value}")


def _merge_config(
    base: dict[str, Any], overrides: dict[str, Any]
) -> dict[str, Any]:
    merged = dict(base)
    merged.update({key: value for key, value in overrides.items() if value is not None})
    return merged


def _network_config(args: argparse.Namespace, settings: Settings) -> NetworkConfig:
    base: dict[str, Any] = {}
    if args.config:
        base = load_config(args.config, NetworkConfig, project_root=settings.project_root).model_dump()
    if args.returns is not None:
        base["prices_file"] = None
    if args.prices is not None:
        base["returns_file"] = None

    overrides = {
        "returns_file": args.returns,
        "prices_file": args.prices,
        "sectors_file": args.sectors,
        "shrinkage": args.intensity,
        "quantile": args.quantile,
        "window": args.window,
        "output_dir": args.output_dir,
    }
    return NetworkConfig.model_validate(_merge_config(base, overrides))


def _sweep_config(args: argparse.Namespace, settings: Settings) -> SweepConfig:
    base: dict[str, Any] = {}
    if args.config:
        base = load_config(args.config, SweepConfig, project_root=settings.project_root).model_dump()

    overrides = {
        "returns_file": args.returns,
        "intensities": args.intensities,
        "quantiles": args.quantiles,
        "max_workers": args.workers,
        "output_file": args.output,
    }
    return SweepConfig.model_validate(_merge_config(base, overrides))


def main(argv: Iterable[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    settings = get_settings()
    _configure_logging(args.structured_logs, settings, args.command)

    try:
        if args.command == "show-settings":
            _print_payload(settings.to_dict(), as_json=args.json)
        elif args.command == "build":
            config = _network_config(args, settings)
            payload = run_network(config, settings=settings)
            _print_payload(payload, as_json=args.json)
        elif args.command == "sweep":
            config = _sweep_config(args, settings)
            table = run_sweep(config, settings=settings)
            print(table.to_string(index=False))
        else:  # pragma: no cover - argparse rejects unknown commands
            parser.error(f"Unknown command: {args.command}")

    except SingularMatrixError as exc:
        print(f"{exc} (try a shrinkage intensity > 0)", file=sys.stderr)
        return EXIT_SINGULAR
    except PrecisionGraphError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_PIPELINE_ERROR
    except (FileNotFoundError, ConfigError, ValidationError, ValueError) as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_INPUT_ERROR

    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
