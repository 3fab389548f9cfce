from __future__ import annotations

import json
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from deliberate_thinking.core.config import Settings
from deliberate_thinking.core.errors import CallLoadError, SessionError, ValidationError
from deliberate_thinking.core.io.load_calls import load_calls
from deliberate_thinking.core.log import setup_logging
from deliberate_thinking.core.model import ALLOWED_PRIORITIES, ALLOWED_ROLES, ALLOWED_STATUSES
from deliberate_thinking.core.session.engine import SessionEngine, ThinkingResponse
from deliberate_thinking.core.validate.validate_call import validate_call

app = typer.Typer(add_completion=False, no_args_is_help=True)
console = Console()


@app.callback()
def _callback() -> None:
    """Deliberate thinking session tools."""
    setup_logging(Settings.from_env())


@app.command("check")
def check(
    path: str = typer.Argument(..., help="Path to a call script (.yaml/.yml/.json)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
) -> None:
    """Validate every call in a script without applying any of them."""
    _require_format(format, "E_CHECK_UNKNOWN_FORMAT")

    def _emit_json(ok: bool, errors: list[tuple[int | None, SessionError]], exit_code: int) -> None:
        payload = {
            "tool": "deliberate",
            "command": "check",
            "ok": ok,
            "error_count": len(errors),
            "errors": [_to_item(i, e) for i, e in errors],
        }
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
        raise typer.Exit(code=exit_code)

    try:
        calls = load_calls(path)
    except CallLoadError as e:
        if format == "json":
            _emit_json(False, [(None, e)], 1)
        _print_errors([(None, e)])
        raise typer.Exit(code=1)

    found: list[tuple[int | None, SessionError]] = []
    for i, call in enumerate(calls):
        _, errors = validate_call(call)
        found.extend((i, e) for e in errors)

    if format == "json":
        _emit_json(not found, found, 2 if found else 0)

    if found:
        _print_errors(found)
        raise typer.Exit(code=2)
    typer.echo(f"OK: {len(calls)} call(s) valid")


@app.command("replay")
def replay(
    path: str = typer.Argument(..., help="Path to a call script (.yaml/.yml/.json)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
) -> None:
    """Run a call script through a fresh session and print each PM report."""
    _require_format(format, "E_REPLAY_UNKNOWN_FORMAT")

    try:
        calls = load_calls(path)
    except CallLoadError as e:
        _print_errors([(None, e)])
        raise typer.Exit(code=1)

    engine = SessionEngine()
    responses: list[ThinkingResponse] = []
    failure: tuple[int, SessionError] | None = None

    for i, call in enumerate(calls):
        try:
            resp = engine.process(call)
        except SessionError as e:
            failure = (i, e)
            break
        responses.append(resp)
        if format == "text":
            _print_response(i, resp)

    if format == "json":
        payload: dict[str, Any] = {
            "tool": "deliberate",
            "command": "replay",
            "ok": failure is None,
            "responses": [r.to_dict() for r in responses],
            "error": _to_item(*failure) if failure else None,
        }
        typer.echo(json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False))
        raise typer.Exit(code=2 if failure else 0)

    if failure:
        _print_errors([failure])
        raise typer.Exit(code=2)

    _print_backlog(engine)
    typer.echo(f"OK: replayed {len(responses)} call(s), ledger has {len(engine.state.ledger)} thought(s)")


@app.command("roles")
def roles() -> None:
    """List the recognized roles, priorities and story statuses."""
    typer.echo("Roles: " + ", ".join(ALLOWED_ROLES))
    typer.echo("Priorities: " + ", ".join(ALLOWED_PRIORITIES))
    typer.echo("Statuses: " + ", ".join(ALLOWED_STATUSES))


def _require_format(format: str, code: str) -> None:
    if format not in ("text", "json"):
        err = ValidationError(
            code=code,
            message=f"unknown format: {format} (choose one of: text, json)",
            path="format",
        )
        _print_errors([(None, err)])
        raise typer.Exit(code=2)


def _to_item(index: int | None, e: SessionError) -> dict:
    source = "load" if isinstance(e, CallLoadError) else "validate" if isinstance(e, ValidationError) else "ledger"
    return {
        "call": index,
        "code": e.code,
        "message": e.message,
        "path": e.path,
        "file": e.file,
        "severity": "error",
        "source": source,
    }


def _print_response(index: int, resp: ThinkingResponse) -> None:
    number = resp.thought_number if resp.thought_number is not None else "-"
    typer.echo(f"#{index + 1} thought={number} history={resp.thought_history_length}")
    for bullet in resp.pm_report.bullets:
        typer.echo(f"  - {bullet}")
    typer.echo(f"  {resp.pm_report.pm_summary}")


def _print_backlog(engine: SessionEngine) -> None:
    snapshot = engine.state.backlog.snapshot()
    if not snapshot:
        return
    table = Table(title="Backlog")
    table.add_column("Id")
    table.add_column("Title")
    table.add_column("Priority")
    table.add_column("Status")
    for story in snapshot.values():
        table.add_row(story.id, story.title, story.priority, story.status)
    console.print(table)


def _print_errors(errors: list[tuple[int | None, SessionError]]) -> None:
    for index, e in errors:
        prefix = f"calls[{index}]: " if index is not None else ""
        typer.echo(f"{prefix}{e}", err=True)


def main() -> None:
    app(prog_name="deliberate")


cli = typer.main.get_command(app)

if __name__ == "__main__":
    main()
