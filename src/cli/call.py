# SPDX-License-Identifier: Apache-2.0
"""Implementation of 'forkmap call' command."""

import functools
import importlib
import json
from typing import Any, Callable

from forkmap import fork_map
from forkmap.exceptions import TaskFailure

from . import _parse_fork_options, _print_error, _print_result


def _resolve_target(target: str) -> Callable:
    """Import ``package.module:attr.path`` and return the callable."""
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise ValueError(f"target must look like package.module:func, got {target!r}")
    obj: Any = importlib.import_module(module_name)
    for part in attr_path.split("."):
        obj = getattr(obj, part)
    if not callable(obj):
        raise TypeError(f"{target} is not callable")
    return obj


def _parse_arg(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def cmd_call(args) -> int:
    func = _resolve_target(args.target)
    call_args = [_parse_arg(a) for a in args.call_args]
    options = _parse_fork_options(args)

    try:
        result = fork_map(functools.partial(func, *call_args), options=options)
    except TaskFailure as e:
        _print_error(str(e), args, kind="task")
        return 1

    _print_result(
        {
            "command": "call",
            "target": args.target,
            "result": result,
        },
        args,
    )
    return 0
