"""CLI interface for tablediff"""

import json
import logging
from pathlib import Path
from typing import List, Optional

import click

from tablediff.application.table_diff_service import TableDiffService
from tablediff.domain.detectors.column_diff_detector import ColumnDiffDetector
from tablediff.domain.matching.row_tokenizer import tokenize_row
from tablediff.domain.models.column_diff import ColumnDiffResult
from tablediff.domain.models.table import TableDiff, TableSnapshot
from tablediff.infrastructure.config.config_manager import ConfigManager
from tablediff.infrastructure.diff_cache import DiffCache
from tablediff.infrastructure.diff_source.base import DiffSource
from tablediff.infrastructure.diff_source.factory import DiffSourceFactory
from tablediff.infrastructure.diff_source.git import GitDiffSource, find_repo_root
from tablediff.infrastructure.diff_source.gitlab import GitLabDiffSource
from tablediff.infrastructure.table_locator import find_tables

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration"""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    logging.getLogger().setLevel(level)
    for logger_name in logging.Logger.manager.loggerDict:
        logging.getLogger(logger_name).setLevel(level)


def _die(message: str, verbose: bool = False, exc: Optional[Exception] = None) -> None:
    """Exit with a user-friendly error message"""
    if exc is not None:
        logger.error(message, exc_info=verbose)
    else:
        logger.error(message)
    raise click.ClickException(message)


def _create_detector(config_manager: ConfigManager) -> ColumnDiffDetector:
    columns_config = config_manager.get_columns_config()
    return ColumnDiffDetector(
        fuzzy_threshold=columns_config.fuzzy_threshold,
        sampling_threshold=columns_config.sampling_threshold,
        max_sample_rows=columns_config.max_sample_rows,
    )


def _create_diff_source(
    config_manager: ConfigManager,
    file_path: Path,
    diff_file: Optional[Path],
    revision: Optional[str],
    verbose: bool,
) -> DiffSource:
    """Create diff source from config

    Args:
        config_manager: Configuration manager
        file_path: Markdown file being diffed
        diff_file: Recorded diff that overrides the configured source
        revision: Revision override from CLI
        verbose: Verbose mode for error reporting

    Returns:
        DiffSource instance
    """
    diff_config = config_manager.get_diff_config()
    if diff_file is not None:
        source_type = "static"
        source_config = {"diff_file": str(diff_file)}
    else:
        source_type = diff_config.source
        if source_type == "gitlab":
            gitlab_config = config_manager.get_gitlab_config()
            source_config = {
                "project_id": gitlab_config.project_id,
                "url": gitlab_config.url,
                "token": gitlab_config.token,
                "retry": config_manager.get_retry_config().model_dump(),
                "revision": revision or diff_config.revision,
            }
        elif source_type == "git":
            source_config = {
                "repo_root": str(file_path.resolve().parent),
                "revision": revision or diff_config.revision,
                "timeout": diff_config.git_timeout,
            }
        else:
            _die("Static diff source requires --diff-file", verbose=verbose)

    logger.info(f"Using diff source: {source_type}")
    try:
        return DiffSourceFactory.create(source_type, source_config)
    except (ValueError, OSError) as e:
        _die(str(e), verbose=verbose, exc=e)


def _repo_relative_path(file_path: Path) -> str:
    """Path of a file relative to its repository root, or to the current directory"""
    resolved = file_path.resolve()
    root = find_repo_root(resolved.parent) or Path.cwd().resolve()
    try:
        return resolved.relative_to(root).as_posix()
    except ValueError:
        logger.warning(f"{file_path} is outside {root}, using the path as given")
        return file_path.as_posix()


def _diff_source_path(diff_source: DiffSource, file_path: Path) -> str:
    """Path in the form the diff source looks files up by"""
    if isinstance(diff_source, GitLabDiffSource):
        return _repo_relative_path(file_path)
    if isinstance(diff_source, GitDiffSource):
        return str(file_path.resolve())
    return str(file_path)


def _read_tables(file_path: Path) -> List[TableSnapshot]:
    with open(file_path, "r", encoding="utf-8") as f:
        return find_tables(f.read())


def _format_column_diff(column_diff: ColumnDiffResult) -> List[str]:
    lines = [f"Columns: {column_diff.change_type.value} ({column_diff.old_column_count} -> {column_diff.new_column_count})"]
    if column_diff.added_columns:
        lines.append(f"  added: {column_diff.added_columns}")
    if column_diff.deleted_columns:
        lines.append(f"  deleted: {column_diff.deleted_columns}")
    lines.append(f"  mapping: {column_diff.mapping}")
    for position in column_diff.positions:
        if position.type.value != "unchanged":
            lines.append(
                f"  {position.type.value:<9} [{position.index}] {position.header!r} "
                f"(confidence {position.confidence:.2f})"
            )
    if column_diff.heuristics:
        lines.append(f"  heuristics: {', '.join(column_diff.heuristics)}")
    return lines


def _output_table_diff(table: TableSnapshot, table_diff: TableDiff) -> None:
    click.echo(f"\nTable {table_diff.table_index} (lines {table.start_line + 1}-{table.end_line + 1})")
    click.echo("=" * 80)
    if not table_diff.row_diffs:
        click.echo("No row changes")
    for diff in table_diff.row_diffs:
        label = {-2: "header", -1: "separator"}.get(diff.row, f"row {diff.row}")
        content = diff.new_content if diff.new_content is not None else diff.old_content
        click.echo(f"  {label:<10} {diff.status.value:<8} {content}")
    for line in _format_column_diff(table_diff.column_diff):
        click.echo(line)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to .tablediff.yml config file",
)
@click.pass_context
def cli(ctx, verbose: bool, config: Path):
    """tablediff - structural diffs of Markdown tables"""
    ctx.ensure_object(dict)
    setup_logging(verbose)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of text")
@click.pass_context
def tables(ctx, file_path: Path, as_json: bool):
    """List the tables found in a Markdown file.

    FILE_PATH: Markdown file to scan
    """
    verbose = ctx.obj.get("verbose", False)
    try:
        found = _read_tables(file_path)
    except (OSError, UnicodeDecodeError) as e:
        _die(f"Failed to read {file_path}: {e}", verbose=verbose, exc=e)

    if as_json:
        payload = [
            {
                "index": index,
                "start_line": table.start_line,
                "end_line": table.end_line,
                "headers": table.headers,
                "row_count": table.row_count,
            }
            for index, table in enumerate(found)
        ]
        click.echo(json.dumps(payload, indent=2))
        return

    if not found:
        click.echo("No tables found")
        return
    for index, table in enumerate(found):
        click.echo(
            f"[{index}] lines {table.start_line + 1}-{table.end_line + 1}: "
            f"{table.column_count} columns, {table.row_count} rows | {', '.join(table.headers)}"
        )


@cli.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--table", "table_index", type=int, help="Only diff the table with this index")
@click.option("--revision", type=str, help="Revision or from..to range. Overrides config.")
@click.option(
    "--diff-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Use a recorded unified diff instead of the configured source",
)
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of text")
@click.pass_context
def rows(
    ctx,
    file_path: Path,
    table_index: Optional[int],
    revision: Optional[str],
    diff_file: Optional[Path],
    as_json: bool,
):
    """Show row and column changes of the tables in a Markdown file.

    FILE_PATH: Markdown file to diff
    """
    verbose = ctx.obj.get("verbose", False)

    try:
        config_manager = ConfigManager(config_path=ctx.obj.get("config_path"))
        found = _read_tables(file_path)
        if table_index is not None and not 0 <= table_index < len(found):
            _die(f"Table index {table_index} out of range ({len(found)} tables found)", verbose=verbose)

        diff_source = _create_diff_source(config_manager, file_path, diff_file, revision, verbose)
        service = TableDiffService(
            diff_source,
            cache=DiffCache(ttl_seconds=config_manager.get_diff_config().cache_ttl_seconds),
            detector=_create_detector(config_manager),
        )

        selected = list(enumerate(found))
        if table_index is not None:
            selected = [selected[table_index]]
        source_path = _diff_source_path(diff_source, file_path)
        results = [
            (table, service.diff_table(source_path, table, table_index=index, revision_range=revision))
            for index, table in selected
        ]

    except click.ClickException:
        raise
    except Exception as e:
        _die(f"Fatal error: {e}", verbose=verbose, exc=e)

    if as_json:
        click.echo(json.dumps([table_diff.to_dict() for _, table_diff in results], indent=2))
        return

    if not results:
        click.echo("No tables found")
        return
    for table, table_diff in results:
        _output_table_diff(table, table_diff)


@cli.command()
@click.option("--old", "old_row", required=True, help="Old header row, e.g. '| A | B |'")
@click.option("--new", "new_row", required=True, help="New header row")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of text")
@click.pass_context
def columns(ctx, old_row: str, new_row: str, as_json: bool):
    """Compare two header rows and classify the column changes."""
    verbose = ctx.obj.get("verbose", False)
    try:
        config_manager = ConfigManager(config_path=ctx.obj.get("config_path"))
        detector = _create_detector(config_manager)
    except Exception as e:
        _die(f"Fatal error: {e}", verbose=verbose, exc=e)

    result = detector.detect(tokenize_row(old_row), tokenize_row(new_row))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return
    for line in _format_column_diff(result):
        click.echo(line)


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == "__main__":
    main()
