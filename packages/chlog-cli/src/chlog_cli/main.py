# SPDX-License-Identifier: MIT
"""CLI entry point for chlog command."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from chlog_changelog import GitHubClient, ReleaseBlock, SourceError, order_releases
from chlog_changelog.ordering import ORDER_DIRECTIONS, ORDER_FIELDS
from chlog_version import InvalidExpressionError, Range, parse_version_expression

from . import __version__
from .config import PACKAGE_MANAGERS, SOURCES, ConfigError, load_config
from .input import ARG_PACKAGE_NAME, parse_package_arg
from .package import detect_package_manager, get_repository_url
from .render import Pager, print_release_list
from .resolve import ChlogError, Query, fill_installed_version, find_releases

LOGGER_NAME = "chlog"


def echo_error(message: str) -> None:
    """Print an error message to stderr."""
    click.secho(f"Error: {message}", fg="red", err=True)


def echo_warning(message: str) -> None:
    """Print a warning message."""
    click.secho(f"Warning: {message}", fg="yellow", err=True)


def configure_logging(debug: bool) -> logging.Logger:
    """Return the chlog logger, printing to stderr when debugging."""
    logger = logging.getLogger(LOGGER_NAME)
    if debug and not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    return logger


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="chlog")
@click.argument("package")
@click.argument("version_range", required=False, default="")
@click.option(
    "-p",
    "--project",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Project directory to look up installed packages in.",
)
@click.option(
    "-m",
    "--package-manager",
    type=click.Choice(PACKAGE_MANAGERS),
    help="Package manager to use instead of detecting it.",
)
@click.option("-l", "--list", "list_all", is_flag=True, help="Print all releases instead of paging.")
@click.option("-b", "--branch", help="Branch holding the changelog (default: main).")
@click.option("-f", "--file", "file_name", help="Changelog file name (default: changelog.md).")
@click.option("-o", "--order-by", type=click.Choice(ORDER_FIELDS), help="Order releases by date or version.")
@click.option("-d", "--order", type=click.Choice(ORDER_DIRECTIONS), help="Order direction.")
@click.option("-s", "--source", type=click.Choice(SOURCES), help="Only use changelog files or GitHub releases.")
@click.option("--token", envvar=["GITHUB_TOKEN", "GH_TOKEN"], help="GitHub token for API requests.")
@click.option("--debug", is_flag=True, help="Print debug diagnostics to stderr.")
def cli(
    package: str,
    version_range: str,
    project: Optional[Path],
    package_manager: Optional[str],
    list_all: bool,
    branch: Optional[str],
    file_name: Optional[str],
    order_by: Optional[str],
    order: Optional[str],
    source: Optional[str],
    token: Optional[str],
    debug: bool,
) -> None:
    """Show the release notes of a package.

    PACKAGE is a package name, a GitHub repository (owner/repo or URL), or
    the URL of a changelog file. VERSION_RANGE selects releases, either a
    range such as "^2.0" or "from..to" where both sides are optional.
    Without a lower bound, releases after the installed version are shown.

    \b
    Examples:
        chlog react
        chlog react 18.0..
        chlog vercel/next.js "14.x" --list
        chlog https://example.com/CHANGELOG.md ..2.0
    """
    logger = configure_logging(debug)
    try:
        releases = _load(
            package,
            version_range,
            project,
            package_manager,
            branch,
            file_name,
            order_by,
            order,
            source,
            token,
            logger,
        )
    except (ChlogError, ConfigError, InvalidExpressionError, SourceError) as e:
        echo_error(str(e))
        raise SystemExit(1)

    if list_all:
        print_release_list(releases)
    else:
        Pager(releases).run()


def _load(
    package: str,
    version_range: str,
    project: Optional[Path],
    package_manager: Optional[str],
    branch: Optional[str],
    file_name: Optional[str],
    order_by: Optional[str],
    order: Optional[str],
    source: Optional[str],
    token: Optional[str],
    logger: logging.Logger,
) -> list[ReleaseBlock]:
    """Resolve the package and return the matching releases, ordered."""
    base_path = (project or Path.cwd()).resolve()
    config = load_config(base_path)
    spec = parse_version_expression(version_range)
    logger.debug("Version spec: %s", spec)

    manager = package_manager or config.package_manager or detect_package_manager(base_path)
    logger.debug("Package manager: %s", manager)

    console = Console(stderr=True)
    with console.status("Resolving package") as spinner, GitHubClient(
        token, logger=logger.getChild("github")
    ) as client:
        arg = parse_package_arg(
            package,
            lambda: get_repository_url(package, manager, base_path) if manager else None,
        )
        logger.debug("Package argument: %s", arg)

        query = Query(
            package=package,
            arg=arg,
            base_path=base_path,
            branch=branch or config.branch,
            file=file_name or config.file,
            package_manager=manager,
            source=source or config.source,
        )
        filled = fill_installed_version(spec, query)
        if filled == spec and arg.type == ARG_PACKAGE_NAME and isinstance(spec, Range):
            if spec.from_.value is None:
                echo_warning(f"Could not find installed version of {package}, showing all releases")
        spec = filled
        releases = find_releases(
            query,
            spec,
            client,
            status=spinner.update,
            logger=logger.getChild("changelog"),
        )

    releases = order_releases(releases, by=order_by or config.order_by, direction=order or config.order)
    if not releases:
        raise ChlogError("No releases found")
    return releases


def main() -> None:
    """Main entry point for the CLI."""
    try:
        cli()
    except Exception as e:
        echo_error(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
