#!/usr/bin/env python3
"""CLI entry point for the changelog sync system."""

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.syntax import Syntax

from .core.auth import BasicAuth
from .core.client import BitbucketClient
from .core.formatter import format_entry, prepend_entry
from .core.writer import ChangelogEntry, ChangelogWriter, build_heading
from .errors import ChangelogSyncError, InvalidConfigError, InvalidCredentialsError
from .models.config import DEFAULT_TITLE, ChangelogSettings

console = Console()


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr; DEBUG when verbose, WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def load_settings(args: argparse.Namespace) -> ChangelogSettings:
    """Load settings from --config if given, else from the environment."""
    if args.config:
        return ChangelogSettings.load(Path(args.config))
    return ChangelogSettings.from_env()


def read_entry_text(args: argparse.Namespace) -> str:
    """Get the entry text from the positional argument, --file, or stdin."""
    if args.text is not None:
        return args.text
    if args.file:
        return Path(args.file).read_text()
    return sys.stdin.read()


def cmd_verify_auth(args: argparse.Namespace) -> int:
    """Verify API authentication."""
    try:
        settings = load_settings(args)
    except InvalidCredentialsError as e:
        console.print(f"[red]Credential error: {e}")
        return 1
    except InvalidConfigError as e:
        console.print(f"[red]Configuration error: {e}")
        return 1

    config = settings.config
    console.print(f"Verifying credentials against {config.server_url}...", style="blue")

    client = BitbucketClient(
        BasicAuth(settings.credentials, config.server_url),
        config,
        timeout=settings.request_timeout,
    )
    try:
        branches = client.verify_connection()
    except ChangelogSyncError as e:
        console.print(f"[red]Verification failed: {e}")
        status_code = getattr(e, "status_code", None)
        if status_code == 401:
            console.print("Authentication failed. Check user and password or token.")
        elif status_code == 404:
            console.print("Repository not found. Check project and repository names.")
        return 1

    console.print("[green]Authentication successful!")
    console.print(f"[bold]Repository:[/bold] {config.project_name}/{config.repository_name}")
    console.print(f"[bold]Default branch:[/bold] {branches.base_branch or 'none'}")
    console.print(f"[bold]Branches:[/bold] {len(branches.available_branches)}")
    marker = "[green]exists" if config.branch_name in branches else "[yellow]will be created"
    console.print(f"[bold]Working branch:[/bold] {config.branch_name} ({marker}[/])")
    return 0


def cmd_publish(args: argparse.Namespace) -> int:
    """Publish an entry to the configured changelog."""
    try:
        writer = ChangelogWriter(load_settings(args))
    except InvalidCredentialsError as e:
        console.print(f"[red]Credential error on initialization: {e}")
        return 1
    except InvalidConfigError as e:
        console.print(f"[red]Configuration error on initialization: {e}")
        return 1

    entry = ChangelogEntry(
        author_label=args.author,
        raw_text=read_entry_text(args),
        commit_message=args.message,
    )

    if writer.submit(entry):
        console.print(f"[green]Published changelog entry to {writer.settings.file_path}")
        return 0

    console.print("[red]Publishing failed; run with --verbose for details")
    return 1


def cmd_init_config(args: argparse.Namespace) -> int:
    """Write the environment settings to a YAML file for use with --config."""
    config_path = Path(args.path)

    if config_path.exists() and not args.force:
        console.print(f"[yellow]{config_path} already exists!")
        console.print("Use --force to overwrite")
        return 1

    try:
        settings = ChangelogSettings.from_env()
    except (InvalidConfigError, InvalidCredentialsError) as e:
        console.print(f"[red]Configuration error: {e}")
        return 1

    settings.save(config_path)
    console.print(f"[green]Settings saved to: {config_path}")
    console.print("Credentials stay in the environment and are not written to the file.")
    return 0


def cmd_preview(args: argparse.Namespace) -> int:
    """Show the changelog an entry would produce, without contacting the server."""
    existing: list[str] = []
    if args.existing:
        existing_path = Path(args.existing)
        if not existing_path.exists():
            console.print(f"[red]File not found: {existing_path}")
            return 1
        existing = existing_path.read_text().splitlines()

    lines = format_entry(read_entry_text(args), build_heading(args.author))
    document = prepend_entry(existing, lines, args.title)

    console.print(Syntax("\n".join(document), "markdown", line_numbers=True))
    return 0


def main() -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="changelog-sync",
        description="Write changelog entries into a file in a remote repository",
    )
    parser.add_argument("--config", help="YAML settings file (default: environment variables)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # verify-auth command
    subparsers.add_parser("verify-auth", help="Verify API authentication")

    # publish command
    publish_parser = subparsers.add_parser("publish", help="Publish a changelog entry")
    publish_parser.add_argument("text", nargs="?", help="Entry text (default: read --file or stdin)")
    publish_parser.add_argument("--author", required=True, help="Who made the change")
    publish_parser.add_argument("--message", help="Commit message")
    publish_parser.add_argument("--file", help="Read entry text from a file")

    # init-config command
    init_parser = subparsers.add_parser("init-config", help="Write environment settings to a YAML file")
    init_parser.add_argument("path", nargs="?", default="changelog-sync.yaml", help="Output file")
    init_parser.add_argument("--force", action="store_true", help="Overwrite an existing file")

    # preview command
    preview_parser = subparsers.add_parser("preview", help="Preview the merged changelog locally")
    preview_parser.add_argument("text", nargs="?", help="Entry text (default: read --file or stdin)")
    preview_parser.add_argument("--author", required=True, help="Who made the change")
    preview_parser.add_argument("--file", help="Read entry text from a file")
    preview_parser.add_argument("--existing", help="Current changelog file to merge into")
    preview_parser.add_argument("--title", default=DEFAULT_TITLE, help="Changelog title line")

    args = parser.parse_args()
    configure_logging(args.verbose)

    if args.command == "verify-auth":
        return cmd_verify_auth(args)
    elif args.command == "publish":
        return cmd_publish(args)
    elif args.command == "preview":
        return cmd_preview(args)
    elif args.command == "init-config":
        return cmd_init_config(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
