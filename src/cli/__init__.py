# SPDX-License-Identifier: Apache-2.0
"""CLI for forkmap - run an importable callable in a forked child."""

import argparse
import json
import sys


def _print_result(data: dict, args: argparse.Namespace) -> None:
    """Print result as JSON (if --json) or human-readable text."""
    if getattr(args, "json", False):
        print(json.dumps(data, default=repr))
    else:
        for key, value in data.items():
            print(f"{key}: {value}")


def _print_error(message: str, args: argparse.Namespace, **extra) -> None:
    """Print error as JSON (if --json) or plain text to stderr."""
    if getattr(args, "json", False):
        print(json.dumps({"error": message, **extra}), file=sys.stderr)
    else:
        for key, value in extra.items():
            print(f"{key}: {value}", file=sys.stderr)
        print(f"error: {message}", file=sys.stderr)


def _add_fork_option_args(parser: argparse.ArgumentParser) -> None:
    """Add fork_map option flags to a subparser."""
    parser.add_argument(
        "--max-payload",
        default=None,
        metavar="SIZE",
        help="Largest result the child may send (e.g. 512K, 16M).",
    )
    parser.add_argument(
        "--close-fds",
        action="store_true",
        default=False,
        help="Close inherited file descriptors (3+) in the child.",
    )


def _parse_fork_options(args: argparse.Namespace):
    """Parse fork option flags into a ForkOptions."""
    from forkmap.process.options import ForkOptions, parse_size
    max_str = getattr(args, "max_payload", None)
    max_payload = parse_size(max_str) if max_str is not None else None
    return ForkOptions(
        max_payload=max_payload,
        close_fds=getattr(args, "close_fds", False),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="forkmap",
        description="CLI for forkmap - run a Python callable in a forked child.",
    )
    sub = parser.add_subparsers(dest="command")

    # --- call ---
    p_call = sub.add_parser(
        "call",
        help="Call MODULE:FUNC in a forked child and print its result.",
        description=(
            "Import TARGET in this process, fork, call it with ARGs in the "
            "child, and print what it returned. Each ARG is parsed as JSON "
            "when possible, otherwise passed as a string."
        ),
    )
    p_call.add_argument("target", metavar="TARGET", help="Callable as package.module:attr")
    p_call.add_argument("call_args", nargs="*", metavar="ARG", help="Positional arguments")
    p_call.add_argument("--json", action="store_true", help="JSON output")
    _add_fork_option_args(p_call)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        if args.command == "call":
            from .call import cmd_call
            sys.exit(cmd_call(args))
        else:
            parser.print_help()
            sys.exit(1)
    except KeyboardInterrupt:
        print(file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        _print_error(str(e), args)
        sys.exit(1)
