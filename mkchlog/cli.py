"""CLI entry point for mkchlog."""

import io
import logging
import sys
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from mkchlog import __version__
from mkchlog.changelog import ChangelogEngine, GenerationError, build_commit_template
from mkchlog.changelog.models import Classification
from mkchlog.config import DEFAULT_CONFIG_PATH, ConfigError, MkchlogConfig, load_config
from mkchlog.config.loader import DEFAULT_CONFIG_TEMPLATE
from mkchlog.vcs import CommitSource, GitError, GitLog, StdinCommitSource
from mkchlog.vcs.stdin import is_git_log

app = typer.Typer(
    name="mkchlog",
    help="Generate user-facing changelogs from structured commit messages.",
    no_args_is_help=True,
)

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

ConfigOpt = Annotated[
    Path,
    typer.Option("--file-path", "-f", help="Path to the YAML config file"),
]
GitPathOpt = Annotated[
    Path | None,
    typer.Option("--git-path", "-g", help="Path to the git repository [default: git-path from config, or ./]"),
]
CommitOpt = Annotated[
    str | None,
    typer.Option(
        "--commit",
        "-c",
        help="This commit and all older ones are skipped [default: skip-commits-up-to from config]",
    ),
]


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"mkchlog {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    log_level: Annotated[
        str, typer.Option("--log-level", help="debug | info | warning | error")
    ] = "warning",
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version"),
    ] = False,
) -> None:
    """Global options."""
    level = _LOG_LEVELS.get(log_level.lower())
    if level is None:
        err_console.print(f"[red]Error:[/red] Invalid log level '{escape(log_level)}'")
        raise typer.Exit(1)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _load(file_path: Path, commit: str | None = None) -> MkchlogConfig:
    try:
        config = load_config(file_path)
    except ConfigError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    if commit:
        config = config.model_copy(update={"skip_commits_up_to": commit})
    return config


def _git(config: MkchlogConfig, git_path: Path | None) -> GitLog:
    path = git_path or Path(config.git_path or ".")
    return GitLog(path, since=config.skip_commits_up_to)


def _print_rejections(rejected: list[Classification]) -> None:
    for result in rejected:
        err_console.print(
            f"[red]commit {escape(result.commit_id)}:[/red] {escape(result.rejection.message)}"
        )


@app.command()
def check(
    from_stdin: Annotated[
        bool, typer.Option("--from-stdin", help="Check a commit message, or piped git log output, read from stdin")
    ] = False,
    commit: CommitOpt = None,
    file_path: ConfigOpt = Path(DEFAULT_CONFIG_PATH),
    git_path: GitPathOpt = None,
) -> None:
    """Verify the structure of commit messages."""
    config = _load(file_path, commit)
    git = _git(config, git_path)

    try:
        source: CommitSource
        if from_stdin:
            text = sys.stdin.read()
            files = git.staged_files() if config.multi_project and not is_git_log(text) else []
            source = StdinCommitSource(io.StringIO(text), files=files)
        else:
            source = git
        report = ChangelogEngine(config).check(source.commits())
    except GitError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if not report.ok:
        _print_rejections(report.rejected)
        err_console.print(
            f"\n[red]{len(report.rejected)} of {report.checked} commit(s) have invalid changelog messages.[/red]"
        )
        raise typer.Exit(1)

    if not from_stdin:
        console.print(
            f"[green]OK[/green]: {report.checked} commit(s) checked "
            f"({report.accepted} accepted, {report.skipped} skipped)"
        )


@app.command("gen")
def generate(
    project: Annotated[
        str | None,
        typer.Option("--project", "-p", help="Project to generate the changelog for (multi-project repositories)"),
    ] = None,
    commit: CommitOpt = None,
    file_path: ConfigOpt = Path(DEFAULT_CONFIG_PATH),
    git_path: GitPathOpt = None,
) -> None:
    """Process git history and output the changelog in markdown format."""
    config = _load(file_path, commit)
    git = _git(config, git_path)

    try:
        output = ChangelogEngine(config).generate(git.commits(), project=project)
    except GenerationError as e:
        _print_rejections(e.rejected)
        err_console.print(f"\n[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    except (GitError, ValueError) as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    typer.echo(output, nl=False)


@app.command("commit-template")
def commit_template(
    files: Annotated[
        list[str] | None,
        typer.Argument(help="Changed file paths [default: read from stdin, one per line]"),
    ] = None,
    file_path: ConfigOpt = Path(DEFAULT_CONFIG_PATH),
) -> None:
    """Print a changelog block template for a new commit message."""
    config = _load(file_path)
    if not files and config.multi_project and not sys.stdin.isatty():
        files = sys.stdin.read().splitlines()

    try:
        template = build_commit_template(config, files or [])
    except ValueError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    typer.echo(template, nl=False)


@app.command()
def init(
    force: Annotated[bool, typer.Option("--force", help="Overwrite existing config")] = False,
    file_path: ConfigOpt = Path(DEFAULT_CONFIG_PATH),
) -> None:
    """Create a starter .mkchlog.yml."""
    if file_path.exists() and not force:
        err_console.print(f"[yellow]{escape(str(file_path))} already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    file_path.write_text(DEFAULT_CONFIG_TEMPLATE, encoding="utf-8")
    console.print(f"[green]Created[/green] {escape(str(file_path))}")


@app.command("help")
def show_help(ctx: typer.Context) -> None:
    """Show this message and exit."""
    typer.echo(ctx.parent.get_help() if ctx.parent else ctx.get_help())


if __name__ == "__main__":
    app()
