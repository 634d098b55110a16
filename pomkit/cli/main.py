#!/usr/bin/env python3
"""
pomkit CLI - inspect and check the environment table.

Usage:
    pomkit envs
    pomkit --env dev url login
    pomkit --config etc/environments.yaml validate
    pomkit credentials RBCClient
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable, Sequence

import pomkit
from pomkit.config import ConfigResolver, EnvironmentTable, load_default_table
from pomkit.exceptions import PomError
from pomkit.log import LogConfig, configure, get_logger
from pomkit.security import get_masker

from .output import ConsoleOutput, OutputWriter

Command = Callable[[ConfigResolver, argparse.Namespace, OutputWriter], None]


def _envs(resolver: ConfigResolver, args: argparse.Namespace, out: OutputWriter) -> None:
    active = resolver.get_active_environment_name()
    for name in resolver.available_environments():
        marker = "*" if name == active else " "
        out.write(f"{marker} {name:<12} {resolver.table[name].name}")


def _validate(resolver: ConfigResolver, args: argparse.Namespace, out: OutputWriter) -> None:
    resolver.validate_config()
    out.write(f"ok: {len(resolver.table)} environments valid")


def _url(resolver: ConfigResolver, args: argparse.Namespace, out: OutputWriter) -> None:
    out.write(resolver.get_url(args.path_key))


def _base_url(resolver: ConfigResolver, args: argparse.Namespace, out: OutputWriter) -> None:
    out.write(resolver.get_base_url())


def _credentials(resolver: ConfigResolver, args: argparse.Namespace, out: OutputWriter) -> None:
    creds = resolver.get_credentials(args.credential_key)
    out.write(f"username: {creds.username}")
    out.write(f"password: {get_masker().mask_string}")


def _summary(resolver: ConfigResolver, args: argparse.Namespace, out: OutputWriter) -> None:
    definition = resolver.resolve_environment()
    out.write(f"environment: {resolver.get_active_environment_name()} ({definition.name})")
    out.write(f"base url:    {resolver.get_base_url()}")
    for key, path in definition.paths.items():
        out.write(f"  path {key:<12} {path}")
    for key, creds in definition.credential_sets.items():
        out.write(f"  user {key:<12} {creds.username}")


_COMMANDS: dict[str, tuple[Command, str]] = {
    "envs": (_envs, "List environments (* marks the active one)"),
    "validate": (_validate, "Validate the environment table"),
    "url": (_url, "Print the full URL of a path key"),
    "base-url": (_base_url, "Print the base URL"),
    "credentials": (_credentials, "Print the username of a credential key"),
    "summary": (_summary, "Summarize the active environment"),
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pomkit",
        description="Inspect and validate the page-object test environment table",
    )
    parser.add_argument(
        "--version", action="version", version=f"pomkit {pomkit.__version__}"
    )
    parser.add_argument(
        "--config",
        "-c",
        default=None,
        metavar="FILE",
        help="environment table file (default: etc/environments.yaml lookup)",
    )
    parser.add_argument(
        "--env",
        "-e",
        default=None,
        metavar="NAME",
        help="environment to use (default: TEST_ENV, else QA)",
    )
    parser.add_argument(
        "--log-level",
        default="warning",
        help="log level for diagnostics (default: warning)",
    )

    sub = parser.add_subparsers(dest="command", metavar="COMMAND", required=True)
    for name, (_, help_text) in _COMMANDS.items():
        cmd = sub.add_parser(name, help=help_text, description=help_text)
        if name == "url":
            cmd.add_argument("path_key", help="path key, e.g. login")
        elif name == "credentials":
            cmd.add_argument("credential_key", help="credential key, e.g. RBCClient")
    return parser


def main(argv: Sequence[str] | None = None, out: OutputWriter | None = None) -> int:
    """
    Main entry point for the pomkit CLI.

    Returns:
        0 on success, 1 when a framework error was reported
    """
    args = build_parser().parse_args(argv)
    out = out or ConsoleOutput()
    configure(LogConfig.from_params(level=args.log_level))
    lg = get_logger("cli")

    try:
        table = (
            EnvironmentTable.from_file(args.config) if args.config else load_default_table()
        )
        resolver = ConfigResolver(table)
        if args.env:
            resolver.set_active_environment(args.env)
        command, _ = _COMMANDS[args.command]
        command(resolver, args, out)
    except (PomError, FileNotFoundError) as e:
        lg.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
