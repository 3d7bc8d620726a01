"""Command-line entry point for Ethakka.

Subcommands mirror the scaffolder workflows::

    ethakka project -n shop
    ethakka module -n product --crud
    ethakka auth --jwt
    ethakka db --type prisma
    ethakka all -n shop --auth --db prisma --modules product,order

Anything not given on the command line is asked for interactively.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any

from rich.panel import Panel

from ethakka.config import ScaffoldConfig
from ethakka.errors import EthakkaError
from ethakka.scaffolder.architectures import architecture_registry
from ethakka.scaffolder.collaborators import (
    InteractivePrompt,
    LocalFilesystem,
    ProcessRunner,
    Question,
    RichPrompt,
    SubprocessRunner,
)
from ethakka.scaffolder.generator import Scaffolder, parse_unit_list
from ethakka.scaffolder.strategies import ArchitectureStrategy
from ethakka.utils import console, print_error

__version__ = "0.1.0"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ethakka",
        description="Ethakka -- generate backend applications with best practices",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  ethakka project -n shop\n"
            "  ethakka module -n product --crud\n"
            "  ethakka all -n shop --auth --db prisma --modules product,order\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        default=None,
        help="JSON configuration file (default: environment variables)",
    )
    parser.add_argument(
        "--root",
        default=None,
        help="Working directory (default: current directory)",
    )
    parser.add_argument(
        "--skip-install",
        action="store_true",
        help="Do not run the dependency install command",
    )

    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    def _with_architecture(p: argparse.ArgumentParser) -> argparse.ArgumentParser:
        p.add_argument(
            "-a", "--architecture",
            default=None,
            help=f"Architecture to use ({', '.join(architecture_registry.keys())})",
        )
        return p

    project = _with_architecture(sub.add_parser("project", help="Create a new project"))
    project.add_argument("-n", "--name", default=None, help="Name of the project")

    module = _with_architecture(sub.add_parser("module", help="Create a new module"))
    module.add_argument("-n", "--name", default=None, help="Name of the module")
    module.add_argument(
        "--crud",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Include CRUD operations",
    )

    auth = _with_architecture(sub.add_parser("auth", help="Add authentication"))
    auth.add_argument(
        "--jwt",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Use JWT for authentication",
    )

    db = _with_architecture(sub.add_parser("db", help="Add database integration"))
    db.add_argument("--type", dest="db_type", default=None, help="Database integration (prisma)")

    everything = _with_architecture(
        sub.add_parser("all", help="Create a complete project with all components")
    )
    everything.add_argument("-n", "--name", default=None, help="Name of the project")
    everything.add_argument(
        "--auth",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Include authentication",
    )
    everything.add_argument("--db", default=None, help="Database integration (prisma)")
    everything.add_argument(
        "--modules",
        default=None,
        help="Comma-separated list of modules to create",
    )
    return parser


def load_config(args: argparse.Namespace) -> ScaffoldConfig:
    config = ScaffoldConfig.load(Path(args.config)) if args.config else ScaffoldConfig.from_env()
    updates: dict[str, Any] = {}
    if args.root:
        updates["root_dir"] = Path(args.root)
    if args.skip_install:
        updates["run_install"] = False
    return config.model_copy(update=updates) if updates else config


async def select_architecture(
    key: str | None, prompt: InteractivePrompt
) -> ArchitectureStrategy | None:
    """Resolve *key*, or ask when several architectures are registered.

    Returns ``None`` when there is nothing to choose, leaving the
    configured default in place.
    """
    if key:
        return architecture_registry.resolve(key)
    kinds = architecture_registry.kinds()
    if len(kinds) == 1:
        return None
    answers = await prompt.ask(
        [
            Question(
                name="architecture",
                message="Select an architecture",
                kind="choice",
                default=kinds[0].value,
                choices=[
                    (kind.value, architecture_registry.get(kind).display_name) for kind in kinds
                ],
            )
        ]
    )
    return architecture_registry.resolve(answers["architecture"])


async def run(
    args: argparse.Namespace,
    config: ScaffoldConfig,
    *,
    prompt: InteractivePrompt | None = None,
    runner: ProcessRunner | None = None,
) -> Any:
    """Dispatch one parsed command to the ``Scaffolder``."""
    prompt = prompt or RichPrompt()
    runner = runner or SubprocessRunner(config.root_dir, timeout=config.install_timeout)
    architecture = await select_architecture(args.architecture, prompt)
    scaffolder = Scaffolder(
        config,
        LocalFilesystem(config.root_dir),
        runner,
        prompt,
        architecture=architecture,
    )

    if args.command == "project":
        return await scaffolder.create_project(args.name)
    if args.command == "module":
        return await scaffolder.create_unit(args.name, args.crud)
    if args.command == "auth":
        return await scaffolder.add_auth(args.jwt)
    if args.command == "db":
        return await scaffolder.add_persistence(args.db_type)
    if args.command == "all":
        units = parse_unit_list(args.modules) if args.modules is not None else None
        return await scaffolder.create_everything(args.name, args.auth, args.db, units)
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``ethakka``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return

    console.print(
        Panel(
            "[bold green]Ethakka[/bold green]\n"
            "Generate applications with best practices",
            border_style="green",
        )
    )

    try:
        config = load_config(args)
        asyncio.run(run(args, config))
    except EthakkaError as exc:
        print_error(f"Error: {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
