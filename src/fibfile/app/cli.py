from __future__ import annotations

import argparse
import importlib
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Literal

from fibfile.config.loader import load_config
from fibfile.usecases.config_models import AppConfig
from fibfile.usecases.pipelines import WRITE_LAYOUTS, copy_stream, sum_first_fibs, write_fibs_into
from stream_conduit.adapters import discovery_modules as adapter_modules
from stream_conduit.adapters.discovery import build_adapter, discover_adapters
from stream_conduit.observability import discovery_modules as log_modules
from stream_conduit.observability.domain.logging import log_message
from stream_conduit.ports.log_sink import LogSink

# Thin wrapper: parse flags, load config, run the pipelines. Pipeline logic lives in usecases.


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fibfile", description="Write fibonacci numbers to a file and copy it")
    parser.add_argument("--config", required=True, help="Path to YAML config")
    parser.add_argument("--count", type=int, help="Override how many numbers to write")
    parser.add_argument("--output", help="Override output file path")
    parser.add_argument("--layout", choices=list(WRITE_LAYOUTS), help="Override fusion layout")
    parser.add_argument("--copy-to", help="Override copy destination (enables the copy)")
    parser.add_argument("--log-path", help="Write structured logs to this JSONL file")
    return parser


def parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def apply_fibs_overrides(config: AppConfig, args: argparse.Namespace) -> None:
    # CLI overrides take precedence over config.
    if args.count is not None:
        if args.count < 0:
            raise ValueError("--count must be >= 0")
        config.fibs.count = args.count
    if args.output is not None:
        config.fibs.output = args.output
    if args.layout is not None:
        config.fibs.layout = args.layout
    if args.copy_to is not None:
        config.copy_file.enabled = True
        config.copy_file.destination = args.copy_to


def apply_logging_overrides(config: AppConfig, args: argparse.Namespace) -> None:
    if args.log_path is None:
        return
    logging_config = config.runtime["logging"]
    logging_config["sink"] = "log_jsonl"
    logging_config["settings"] = {**logging_config.get("settings", {}), "path": args.log_path}


def build_log_sink(config: AppConfig) -> LogSink:
    # The configured level travels to the sink as a setting.
    logging_config = config.runtime["logging"]
    adapters = discover_adapters([importlib.import_module(name) for name in log_modules()], role="log")
    settings = {**logging_config["settings"], "level": logging_config["level"]}
    return build_adapter(adapters, logging_config["sink"], settings)


def build_file_adapter(config: AppConfig, role: Literal["source", "sink"], path: Path) -> Any:
    # Builds `file_source` or `file_sink` through adapter discovery, like the log sink.
    adapters = discover_adapters([importlib.import_module(name) for name in adapter_modules()], role=role)
    settings = {"path": str(path), "chunk_size": config.runtime["chunk_size"]}
    return build_adapter(adapters, f"file_{role}", settings)


def run(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    config = load_config(Path(args.config))
    apply_fibs_overrides(config, args)
    apply_logging_overrides(config, args)

    log_sink = build_log_sink(config)
    charset = config.runtime["charset"]
    try:
        print(f"First ten fibs: {sum_first_fibs(10)}")

        output = Path(config.fibs.output)
        written = write_fibs_into(
            config.fibs.count,
            build_file_adapter(config, "sink", output),
            layout=config.fibs.layout,
            charset=charset,
            log_sink=log_sink,
        )
        log_sink.emit(log_message("info", "fibfile.written", path=str(output), bytes=written, count=config.fibs.count))

        if config.copy_file.enabled:
            destination = Path(config.copy_file.destination)
            copied = copy_stream(
                build_file_adapter(config, "source", output),
                build_file_adapter(config, "sink", destination),
                log_sink=log_sink,
            )
            log_sink.emit(
                log_message("info", "fibfile.copied", source=str(output), path=str(destination), bytes=copied)
            )
    finally:
        log_sink.close()
    return 0
