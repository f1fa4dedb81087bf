from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace

import pytest

from fibfile.app.cli import (
    apply_fibs_overrides,
    apply_logging_overrides,
    build_file_adapter,
    build_log_sink,
    parse_args,
    run,
)
from fibfile.main import main
from fibfile.usecases.config_models import AppConfig
from stream_conduit.config.validator import ConfigError
from stream_conduit.kernel.fusion import connect
from stream_conduit.kernel.sink import consume
from stream_conduit.kernel.source import source_list
from stream_conduit.observability.domain.logging import LogMessage


def _overrides(**values: object) -> SimpleNamespace:
    defaults = {"count": None, "output": None, "layout": None, "copy_to": None, "log_path": None}
    defaults.update(values)
    return SimpleNamespace(**defaults)


def _write_config(tmp_path: Path, *, copy: bool = True, extra: str = "") -> Path:
    path = tmp_path / "fibfile.yml"
    path.write_text(
        "\n".join(
            [
                "version: 1",
                "fibs:",
                "  count: 10",
                f"  output: {tmp_path / 'fibs.txt'}",
                "copy_file:",
                f"  enabled: {'true' if copy else 'false'}",
                f"  destination: {tmp_path / 'fibs2.txt'}",
                extra,
            ]
        ),
        encoding="utf-8",
    )
    return path


def test_parse_args_reads_flags() -> None:
    args = parse_args(
        ["--config", "cfg.yml", "--count", "5", "--layout", "conduit", "--copy-to", "b.txt", "--log-path", "l.jsonl"]
    )
    assert args.config == "cfg.yml"
    assert args.count == 5
    assert args.layout == "conduit"
    assert args.copy_to == "b.txt"
    assert args.log_path == "l.jsonl"
    assert args.output is None


def test_parse_args_rejects_unknown_layout() -> None:
    with pytest.raises(SystemExit):
        parse_args(["--config", "cfg.yml", "--layout", "sideways"])


def test_fibs_overrides_take_precedence() -> None:
    config = AppConfig.model_validate({"copy_file": {"enabled": False}})
    apply_fibs_overrides(config, _overrides(count=3, output="o.txt", layout="sink_fused", copy_to="c.txt"))
    assert config.fibs.count == 3
    assert config.fibs.output == "o.txt"
    assert config.fibs.layout == "sink_fused"
    assert config.copy_file.enabled is True
    assert config.copy_file.destination == "c.txt"


def test_negative_count_override_is_rejected() -> None:
    with pytest.raises(ValueError):
        apply_fibs_overrides(AppConfig(), _overrides(count=-1))


def test_log_path_override_switches_to_jsonl(tmp_path: Path) -> None:
    config = AppConfig()
    apply_logging_overrides(config, _overrides(log_path=str(tmp_path / "run.jsonl")))
    assert config.runtime["logging"]["sink"] == "log_jsonl"
    assert config.runtime["logging"]["settings"]["path"] == str(tmp_path / "run.jsonl")


def test_log_sink_filters_below_configured_level(capsys: pytest.CaptureFixture[str]) -> None:
    config = AppConfig.model_validate({"runtime": {"logging": {"sink": "log_stdout", "level": "info"}}})
    sink = build_log_sink(config)
    sink.emit(LogMessage(level="debug", message="resource.acquired"))
    sink.emit(LogMessage(level="info", message="fibfile.written"))
    sink.close()
    lines = capsys.readouterr().out.splitlines()
    assert [json.loads(line)["message"] for line in lines] == ["fibfile.written"]


def test_file_adapters_are_built_from_runtime_settings(tmp_path: Path) -> None:
    config = AppConfig.model_validate({"runtime": {"chunk_size": 4}})
    path = tmp_path / "data.bin"
    assert connect(source_list([b"0123456789"]), build_file_adapter(config, "sink", path)) == 10
    chunks = connect(build_file_adapter(config, "source", path), consume())
    assert chunks == [b"0123", b"4567", b"89"]


def test_run_writes_and_copies(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config_path = _write_config(tmp_path)
    assert run(["--config", str(config_path)]) == 0

    out = capsys.readouterr().out.splitlines()
    assert out[0] == "First ten fibs: 88"
    assert [json.loads(line)["message"] for line in out[1:]] == ["fibfile.written", "fibfile.copied"]
    expected = "0\n1\n1\n2\n3\n5\n8\n13\n21\n34\n"
    assert (tmp_path / "fibs.txt").read_text(encoding="utf-8") == expected
    assert (tmp_path / "fibs2.txt").read_text(encoding="utf-8") == expected


def test_run_without_copy(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config_path = _write_config(tmp_path, copy=False)
    assert main(["--config", str(config_path), "--count", "3", "--layout", "sink_fused"]) == 0
    assert (tmp_path / "fibs.txt").read_text(encoding="utf-8") == "0\n1\n1\n"
    assert not (tmp_path / "fibs2.txt").exists()
    assert capsys.readouterr().out.startswith("First ten fibs: 88\n")


def test_run_writes_debug_log_to_jsonl(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path, extra="runtime:\n  logging:\n    level: debug\n")
    log_path = tmp_path / "logs" / "run.jsonl"
    run(["--config", str(config_path), "--log-path", str(log_path)])

    records = [json.loads(line) for line in log_path.read_text(encoding="utf-8").splitlines()]
    messages = [record["message"] for record in records]
    assert messages.count("resource.acquired") == messages.count("resource.released") == 3
    assert messages[-1] == "fibfile.copied"
    written = next(record for record in records if record["message"] == "fibfile.written")
    assert written["fields"]["bytes"] == len("0\n1\n1\n2\n3\n5\n8\n13\n21\n34\n")


def test_run_with_invalid_config_fails_fast(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path, extra="unexpected: true\n")
    with pytest.raises(ConfigError):
        run(["--config", str(config_path)])
