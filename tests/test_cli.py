# SPDX-License-Identifier: Apache-2.0
"""Tests for the forkmap CLI."""

import json
import os

import pytest

from cli import build_parser, main
from cli.call import _parse_arg, _resolve_target

needs_fork = pytest.mark.skipif(
    not hasattr(os, "fork"),
    reason="Platform has no fork()",
)


def _run(argv):
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


class TestParser:
    def test_call_defaults(self):
        args = build_parser().parse_args(["call", "operator:add", "1", "2"])
        assert args.command == "call"
        assert args.target == "operator:add"
        assert args.call_args == ["1", "2"]
        assert args.max_payload is None
        assert args.close_fds is False
        assert args.json is False

    def test_call_options(self):
        args = build_parser().parse_args(
            ["call", "m:f", "--max-payload", "16M", "--close-fds", "--json"]
        )
        assert args.max_payload == "16M"
        assert args.close_fds is True
        assert args.json is True

    def test_no_command_prints_help(self, capsys):
        assert _run([]) == 0
        assert "usage" in capsys.readouterr().out


class TestHelpers:
    def test_parse_arg_json(self):
        assert _parse_arg("42") == 42
        assert _parse_arg('{"a": [1]}') == {"a": [1]}

    def test_parse_arg_falls_back_to_string(self):
        assert _parse_arg("hello") == "hello"

    def test_resolve_dotted_attribute(self):
        import os.path
        assert _resolve_target("os:path.join") is os.path.join

    @pytest.mark.parametrize("target", ["operator", ":add", "operator:"])
    def test_resolve_rejects_malformed(self, target):
        with pytest.raises(ValueError):
            _resolve_target(target)

    def test_resolve_rejects_non_callable(self):
        with pytest.raises(TypeError):
            _resolve_target("os:sep")


@needs_fork
class TestCall:
    def test_success_text(self, capsys):
        assert _run(["call", "operator:mul", "6", "7"]) == 0
        out = capsys.readouterr().out
        assert "target: operator:mul" in out
        assert "result: 42" in out

    def test_success_json(self, capsys):
        assert _run(["call", "operator:add", "[1]", "[2]", "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data == {"command": "call", "target": "operator:add", "result": [1, 2]}

    def test_task_failure(self, capsys):
        assert _run(["call", "json:loads", "{"]) == 1
        err = capsys.readouterr().err
        assert "kind: task" in err
        assert "JSONDecodeError" in err

    def test_task_failure_json(self, capsys):
        assert _run(["call", "json:loads", "{", "--json"]) == 1
        data = json.loads(capsys.readouterr().err)
        assert data["kind"] == "task"

    def test_payload_too_large(self, capsys):
        assert _run(["call", "operator:mul", '"ab"', "10000", "--max-payload", "1K"]) == 1
        assert "exceeds 1024 bytes" in capsys.readouterr().err

    def test_bad_target(self, capsys):
        assert _run(["call", "no_such_module_xyz:f"]) == 1
        assert "error:" in capsys.readouterr().err
