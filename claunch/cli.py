from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .assistant.options import PermissionMode
from .config import ClaunchPaths, ConfigManager
from .core.notify import ConsoleNotifier
from .core.session_log import SessionLogger, set_active_logger
from .core.workspace import Workspace
from .launch.apps import DEFAULT_REGISTRY
from .launcher import Diagnostics, Launcher


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="claunch",
        description="claunch - open Claude Code in a terminal or editor at the current document's folder",
    )
    parser.add_argument("-v", "--version", action="store_true", help="Show version and exit")
    parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Workspace root folder (defaults to the current directory)",
    )
    sub = parser.add_subparsers(dest="command")

    open_cmd = sub.add_parser("open", help="Launch Claude Code for a document or folder")
    open_cmd.add_argument("path", nargs="?", type=Path, help="Active document or folder")
    open_cmd.add_argument(
        "--app",
        choices=DEFAULT_REGISTRY.identifiers(),
        help="Target application (overrides terminal_app)",
    )
    open_cmd.add_argument(
        "--vault-root",
        action="store_true",
        help="Always open the workspace root instead of the document's folder",
    )

    sub.add_parser("command", help="Print the assistant command line that would be run")

    apps_cmd = sub.add_parser("apps", help="List supported applications and whether they are installed")
    apps_cmd.add_argument("--refresh", action="store_true", help="Ignore cached detection results")

    sub.add_parser("doctor", help="Check the assistant CLI, applications and settings")
    sub.add_parser("init", help="Create .claunch/claunch.json in the workspace")

    mode_cmd = sub.add_parser("mode", help="Set the permission mode and its tool preset")
    mode_cmd.add_argument("mode", help="default, acceptEdits, bypassPermissions, plan or custom")
    return parser


class ClaunchCLI:
    """Command dispatcher behind the ``claunch`` entry point."""

    def __init__(self, root: Optional[Path] = None, console: Optional[Console] = None) -> None:
        self.console = console or Console()
        self.root = (root or Path.cwd()).expanduser().resolve()
        self.paths = ClaunchPaths(self.root)
        self.config = ConfigManager(self.paths, console=self.console)

    def launcher(self, document: Optional[Path] = None, *, vault_root: bool = False) -> Launcher:
        settings = self.config.load_settings()
        session_logger = SessionLogger(self.paths, settings.debug)
        set_active_logger(session_logger)
        workspace = Workspace(self.root, active_document=document, always_open_root=vault_root)
        return Launcher(
            self.config,
            workspace,
            notifier=ConsoleNotifier(self.console),
            session_logger=session_logger,
        )

    async def open(self, document: Optional[Path], app: Optional[str], vault_root: bool) -> int:
        # A path typed on the command line is relative to the shell, not to --root.
        if document is not None and not document.expanduser().is_absolute():
            document = Path.cwd() / document
        outcome = await self.launcher(document, vault_root=vault_root).open(app)
        return 0 if outcome.ok else 1

    def show_command(self) -> int:
        # Plain print so the line can be piped or copied.
        print(self.launcher().assistant_command())
        return 0

    async def show_apps(self, refresh: bool) -> int:
        report = await self.launcher().diagnostics(refresh=refresh)
        self.console.print(self._apps_table(report))
        return 0

    async def doctor(self) -> int:
        report = await self.launcher().diagnostics(refresh=True)
        settings = report.settings
        if report.assistant_ok:
            self.console.print(f"[green]Claude Code found:[/green] {escape(str(report.assistant_path))}")
        elif settings.use_custom_assistant_path:
            self.console.print(f"[red]Claude Code not found at {escape(settings.assistant_path)}.[/red]")
        else:
            self.console.print("[red]Claude Code not found. Please install it first.[/red]")
        self.console.print(self._apps_table(report))

        table = Table(show_header=True, box=box.MINIMAL_DOUBLE_HEAD, header_style="bold")
        table.add_column("Setting", style="cyan", no_wrap=True)
        table.add_column("Value", style="white")
        table.add_row("terminal_app", escape(settings.terminal_app))
        table.add_row("permission_mode", settings.options.permission_mode.value)
        table.add_row("terminal_delay_ms", str(settings.terminal_delay_ms))
        table.add_row("automation_timeout_ms", str(settings.automation_timeout_ms))
        table.add_row("always_open_vault_root", str(settings.always_open_vault_root))
        table.add_row("global config", escape(str(self.paths.global_config_file)))
        table.add_row("project config", escape(str(self.paths.config_file)))
        self.console.print(table)

        if settings.terminal_app not in DEFAULT_REGISTRY:
            self.console.print(
                f"[red]Invalid terminal application selected: '{escape(settings.terminal_app)}'[/red]"
            )
            return 1
        return 0 if report.assistant_ok else 1

    def init(self) -> int:
        if self.config.create_config_template():
            self.console.print(f"[green]Created {escape(str(self.paths.config_file))}[/green]")
        else:
            self.console.print(f"[yellow]{escape(str(self.paths.config_file))} already exists.[/yellow]")
        return 0

    def set_mode(self, raw: str) -> int:
        try:
            mode = PermissionMode.parse(raw)
        except ValueError as exc:
            self.console.print(f"[red]{escape(str(exc))}[/red]")
            return 2
        options = self.config.set_permission_mode(mode)
        tools = ", ".join(options.allowed_tools) or "none"
        self.console.print(f"[green]Permission mode set to {mode.value}[/green] (allowed tools: {tools})")
        return 0

    def _apps_table(self, report: Diagnostics) -> Table:
        table = Table(show_header=True, box=box.MINIMAL_DOUBLE_HEAD, header_style="bold")
        table.add_column("App", style="cyan", no_wrap=True)
        table.add_column("Name", style="white")
        table.add_column("Installed", no_wrap=True)
        table.add_column("Bundle id", style="dim")
        for descriptor in DEFAULT_REGISTRY:
            if descriptor.identifier in report.applications:
                mark = "[green]✓[/green]" if report.applications[descriptor.identifier] else "[red]✗[/red]"
            else:
                mark = "[dim]-[/dim]"
            table.add_row(
                descriptor.identifier,
                descriptor.display_name,
                mark,
                descriptor.bundle_id or "",
            )
        return table


async def _run(cli: ClaunchCLI, args: argparse.Namespace) -> int:
    if args.command == "open":
        return await cli.open(args.path, args.app, args.vault_root)
    if args.command == "apps":
        return await cli.show_apps(args.refresh)
    if args.command == "doctor":
        return await cli.doctor()
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.version:
        from claunch import __version__

        print(f"claunch {__version__}")
        return
    if args.command is None:
        args.command = "open"
        args.path = None
        args.app = None
        args.vault_root = False

    cli = ClaunchCLI(args.root)
    try:
        if args.command == "command":
            code = cli.show_command()
        elif args.command == "init":
            code = cli.init()
        elif args.command == "mode":
            code = cli.set_mode(args.mode)
        else:
            code = asyncio.run(_run(cli, args))
    finally:
        set_active_logger(None)
    sys.exit(code)


if __name__ == "__main__":
    main()
