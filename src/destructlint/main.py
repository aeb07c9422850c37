"""destructlint CLI - consistent destructuring of React props, state and context."""
import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.markup import escape
from rich.table import Table

from .config import MODES, SIGNATURE_MODES, __version__, get_config
from .linter import LintResult, Linter
from .rules.destructuring_assignment import MESSAGES, RULE_NAME
from .utils.console import make_console


app = typer.Typer(
    name="destructlint",
    help="Enforce consistent destructuring of React props, state and context",
    add_completion=False,
)
console = make_console()
err_console = make_console(stderr=True)


def _result_to_dict(result: LintResult) -> dict:
    return {
        'filePath': result.file_path,
        'errorCount': result.error_count,
        'fixableCount': result.fixable_count,
        'fixesApplied': result.fixes_applied,
        'messages': [
            {
                'ruleId': violation.rule,
                'messageId': violation.message_id,
                'message': violation.message,
                'line': violation.line,
                'column': violation.column + 1,
                'endLine': violation.end_line,
                'endColumn': violation.end_column + 1,
                'fixable': violation.fixable,
            }
            for violation in result.violations
        ],
    }


def _print_result_table(result: LintResult, base: Path):
    try:
        display_path = Path(result.file_path).resolve().relative_to(base)
    except ValueError:
        display_path = Path(result.file_path)

    table = Table(title=escape(str(display_path)), title_justify="left", show_header=True,
                  header_style="bold magenta", box=None)
    table.add_column("Location", style="cyan", no_wrap=True)
    table.add_column("Message", no_wrap=False)
    table.add_column("Rule", style="dim", no_wrap=True)
    table.add_column("Fix", justify="center")

    for violation in result.violations:
        table.add_row(
            f"{violation.line}:{violation.column + 1}",
            escape(violation.message),
            violation.message_id,
            "[green]✓[/green]" if violation.fixable else "",
        )
    console.print(table)
    console.print()


@app.command()
def check(
    paths: Optional[List[str]] = typer.Argument(None, help="Files or directories to lint (default: current directory)"),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="Rule mode: 'always' or 'never' (env: DESTRUCTLINT_MODE)"),
    ignore_class_fields: bool = typer.Option(False, "--ignore-class-fields", help="Ignore this.props/state/context inside class field initializers"),
    destructure_in_signature: Optional[str] = typer.Option(None, "--destructure-in-signature", help="'always' or 'ignore': require props to be destructured in the signature"),
    react_version: Optional[str] = typer.Option(None, "--react-version", help="React version of the linted code (useContext checks need >= 16.9)"),
    pragma: Optional[str] = typer.Option(None, "--pragma", help="React namespace name (default: React)"),
    fix: bool = typer.Option(False, "--fix", help="Apply automatic fixes in place"),
    output_format: str = typer.Option("table", "--format", "-f", help="Output format: 'table' or 'json'"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print the summary"),
):
    """Lint JavaScript/TypeScript files for props/state/context destructuring style."""
    config = get_config()
    try:
        options = config.rule_options(
            mode=mode,
            ignore_class_fields=ignore_class_fields or None,
            destructure_in_signature=destructure_in_signature,
            react_version=react_version,
            pragma=pragma,
        )
    except ValueError as e:
        err_console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(2)

    if output_format not in ('table', 'json'):
        err_console.print(f"[bold red]Error:[/bold red] Invalid format '{escape(output_format)}'. Use 'table' or 'json'.")
        raise typer.Exit(2)

    targets = [Path(p) for p in (paths or ['.'])]
    missing = [p for p in targets if not p.exists()]
    if missing:
        err_console.print(f"[bold red]Error:[/bold red] Path does not exist: {escape(str(missing[0]))}")
        raise typer.Exit(2)

    linter = Linter(options)
    results = linter.lint_paths(targets, fix=fix)

    for result in results:
        if result.has_syntax_errors:
            err_console.print(f"[yellow]⚠ {escape(result.file_path)}: syntax errors, results may be incomplete[/yellow]")

    total = sum(result.error_count for result in results)
    fixable = sum(result.fixable_count for result in results)
    fixed = sum(result.fixes_applied for result in results)

    if output_format == 'json':
        typer.echo(json.dumps([_result_to_dict(result) for result in results], indent=2))
    else:
        if not quiet:
            base = Path.cwd().resolve()
            for result in results:
                if result.violations:
                    _print_result_table(result, base)

        if fixed:
            console.print(f"[bold cyan]Fixed {fixed} problem(s)[/bold cyan]")
        if total:
            summary = f"[bold red]✗ {total} problem(s)[/bold red] in {len(results)} file(s)"
            if fixable and not fix:
                summary += f" [dim]({fixable} fixable with --fix)[/dim]"
            console.print(summary)
        else:
            console.print(f"[bold green]✓ No problems found[/bold green] in {len(results)} file(s)")

    if total:
        raise typer.Exit(1)


@app.command()
def rules():
    """List the messages the destructuring-assignment rule can report."""
    table = Table(title=f"Rule: {RULE_NAME}", show_header=True, header_style="bold magenta")
    table.add_column("Message ID", style="cyan")
    table.add_column("Message")
    for message_id, template in MESSAGES.items():
        table.add_row(message_id, escape(template))
    console.print(table)
    console.print(f"[dim]Modes: {', '.join(MODES)} | destructureInSignature: {', '.join(SIGNATURE_MODES)}[/dim]")


@app.command()
def version():
    """Print the destructlint version."""
    console.print(f"destructlint {__version__}")


if __name__ == "__main__":
    app()
