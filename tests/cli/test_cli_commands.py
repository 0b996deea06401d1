"""Tests for the planwire CLI commands."""

from __future__ import annotations

from pathlib import Path

import msgspec
import pytest

from cli.app import LimitOptions, meta_launcher, resolve_limits
from cli.commands.codec import ConvertOptions, decode_command, encode_command
from cli.commands.inspect import explain_command, validate_command
from cli.commands.version import version_command
from cli.context import RunContext
from cli.exit_codes import ExitCode
from plan_ir.codec import decode, decode_json, encode_json, plan_fingerprint
from plan_ir.config import PlanIRConfig
from plan_ir.expressions import call, col
from plan_ir.relations import Join, JoinType, NamedTable, Plan, Read


def _write_json(path: Path, plan: Plan) -> Path:
    path.write_bytes(encode_json(plan))
    return path


def _conflicting_join() -> Plan:
    return Plan(
        root=Join(
            left=Read(read_type=NamedTable(unparsed_identifier="t")),
            right=Read(read_type=NamedTable(unparsed_identifier="u")),
            join_type=JoinType.INNER,
            join_condition=call("=", col("t.id"), col("u.id")),
            using_columns=("id",),
        )
    )


def test_encode_then_decode_to_stdout(
    tmp_path: Path, sample_plan: Plan, capsys: pytest.CaptureFixture[str]
) -> None:
    """Ensure a JSON plan encodes to MessagePack and decodes back to JSON."""
    source = _write_json(tmp_path / "plan.json", sample_plan)
    target = tmp_path / "out" / "plan.bin"
    result = encode_command(source, target)
    assert result.ok
    assert result.artifacts["plan"] == target
    assert result.details["fingerprint"] == plan_fingerprint(sample_plan)
    assert decode(target.read_bytes()) == sample_plan

    assert decode_command(target) == 0
    assert decode_json(capsys.readouterr().out) == sample_plan


def test_decode_to_file_uses_target_suffix(tmp_path: Path, sample_plan: Plan) -> None:
    """Ensure ``auto`` output picks JSON for a ``.json`` target."""
    source = _write_json(tmp_path / "plan.json", sample_plan)
    target = tmp_path / "copy.json"
    result = decode_command(source, target)
    assert not isinstance(result, int)
    assert result.ok
    assert decode_json(target.read_bytes()) == sample_plan


def test_encode_validates_unless_skipped(tmp_path: Path) -> None:
    """Ensure encoding rejects invalid plans unless validation is skipped."""
    source = _write_json(tmp_path / "bad.json", _conflicting_join())
    with pytest.raises(ValueError, match="mutually exclusive"):
        encode_command(source, tmp_path / "bad.bin")
    result = encode_command(
        source, tmp_path / "bad.bin", ConvertOptions(skip_validation=True)
    )
    assert result.ok


def test_validate_reports_ok(
    tmp_path: Path, sample_plan: Plan, capsys: pytest.CaptureFixture[str]
) -> None:
    """Ensure a valid plan prints its fingerprint."""
    source = _write_json(tmp_path / "plan.json", sample_plan)
    assert validate_command(source) == ExitCode.SUCCESS
    assert capsys.readouterr().out == f"ok {plan_fingerprint(sample_plan)}\n"


def test_validate_json_report(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Ensure violations are reported as JSON with the matching exit code."""
    source = _write_json(tmp_path / "bad.json", _conflicting_join())
    code = validate_command(source, output_format="json")
    assert code == ExitCode.SEMANTIC_CONFLICT
    report = msgspec.json.decode(capsys.readouterr().out)
    assert report["ok"] is False
    assert report["violations"][0]["rule"] == "join_condition_using_columns_exclusive"
    assert report["violations"][0]["path"] == "join"


def test_validate_honors_run_context_limits(
    tmp_path: Path, sample_plan: Plan, capsys: pytest.CaptureFixture[str]
) -> None:
    """Ensure the injected limits reach the decoder."""
    source = _write_json(tmp_path / "plan.json", sample_plan)
    context = RunContext(log_level="WARNING", config=PlanIRConfig(max_depth=2))
    with pytest.raises(ValueError, match="maximum depth"):
        validate_command(source, run_context=context)
    assert capsys.readouterr().out == ""


def test_explain_lists_tree_and_violations(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """Ensure explain prints the tree followed by the violations."""
    source = _write_json(tmp_path / "bad.json", _conflicting_join())
    assert explain_command(source) == ExitCode.SEMANTIC_CONFLICT
    out = capsys.readouterr().out
    assert out.startswith("plan(version=1)\n  join(")
    assert "1 violation(s):" in out
    assert "  join: [join_condition_using_columns_exclusive]" in out


def test_version_command(capsys: pytest.CaptureFixture[str]) -> None:
    """Ensure version info is printed as JSON."""
    assert version_command() == 0
    info = msgspec.json.decode(capsys.readouterr().out)
    assert info["wire_version"] == 1
    assert "msgspec" in info["dependencies"]


def test_resolve_limits(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure command-line limits override the environment and are checked."""
    monkeypatch.setenv("PLANWIRE_MAX_DEPTH", "40")
    assert resolve_limits(LimitOptions()).max_depth == 40
    assert resolve_limits(LimitOptions(max_depth=8)).max_depth == 8
    with pytest.raises(ValueError, match="Invalid limit override"):
        resolve_limits(LimitOptions(max_depth=0))


def test_launcher_runs_command(
    tmp_path: Path, sample_plan: Plan, capsys: pytest.CaptureFixture[str]
) -> None:
    """Ensure the meta launcher parses tokens and injects the run context."""
    source = _write_json(tmp_path / "plan.json", sample_plan)
    assert meta_launcher("validate", str(source)) == ExitCode.SUCCESS
    assert capsys.readouterr().out.startswith("ok ")
    depth_limited = meta_launcher(
        "validate", str(source), limits=LimitOptions(max_depth=2)
    )
    assert depth_limited == ExitCode.DEPTH_EXCEEDED


def test_launcher_reports_decode_errors(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """Ensure malformed payloads exit with the decode code and a JSON error."""
    source = tmp_path / "plan.bin"
    source.write_bytes(b"\xc1\xc1")
    assert meta_launcher("check", str(source)) == ExitCode.DECODE_ERROR
    lines = [line for line in capsys.readouterr().err.splitlines() if line.startswith("{")]
    payload = msgspec.json.decode(lines[-1])
    assert payload["error"]["rule"] == "malformed_payload"


def test_launcher_unknown_command() -> None:
    """Ensure unknown commands map to the parse error code."""
    assert meta_launcher("no-such-command") == ExitCode.PARSE_ERROR
