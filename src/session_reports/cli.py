"""CLI entry points: session-reports serve, list, show, export, delete, init, status."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click

from .config import Config
from .errors import ReportError
from .store import ReportStore


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Session Reports: collect, browse and export session transcripts."""
    ctx.ensure_object(dict)
    Config().load_env_file()  # Seed os.environ before constructing final config
    config = Config()
    ctx.obj["config"] = config
    ctx.obj["store"] = ReportStore(config.data_file)


@cli.command()
@click.option("--host", default=None, help="Interface to bind (defaults to config)")
@click.option("--port", type=int, default=None, help="Port to listen on (defaults to config)")
@click.option("--debug", is_flag=True, help="Run Flask in debug mode")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None, debug: bool) -> None:
    """Run the report receiver and dashboard."""
    from .server import create_app

    config = ctx.obj["config"]
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config.ensure_data_dir()
    host = host or config.host
    port = port or config.port
    app = create_app(config, ctx.obj["store"])

    click.echo("=" * 50)
    click.echo("Session Report Receiver")
    click.echo("=" * 50)
    click.echo(f"Server running at http://{host}:{port}")
    click.echo(f"Dashboard available at http://{host}:{port}/")
    click.echo(f"API endpoint: http://{host}:{port}/api/report")
    click.echo(f"Data file: {config.data_file}")
    click.echo("=" * 50)

    app.run(host=host, port=port, debug=debug)


@cli.command(name="list")
@click.option("--json", "as_json", is_flag=True, help="Output reports as JSON")
@click.pass_context
def list_reports(ctx: click.Context, as_json: bool) -> None:
    """List stored reports, newest first."""
    from .render import format_timestamp

    reports = _call(ctx.obj["store"].list_all)

    if as_json:
        output = [
            {"id": r.id, "session_id": r.session_id, "timestamp": r.timestamp}
            for r in reports
        ]
        click.echo(json.dumps(output, indent=2))
        return

    if not reports:
        click.echo("No reports yet.")
        return

    for r in reports:
        click.echo(f"#{r.id}  {format_timestamp(r.timestamp)}  session {r.session_id}")


@cli.command()
@click.argument("report_id")
@click.option("--json", "as_json", is_flag=True, help="Print the stored report as JSON")
@click.pass_context
def show(ctx: click.Context, report_id: str, as_json: bool) -> None:
    """Print a report's conversation."""
    from .render import build_report_view, format_timestamp, role_label

    report = _call(ctx.obj["store"].get_by_id, report_id)
    if report is None:
        raise click.ClickException(f"Report not found: {report_id}")

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
        return

    view = _call(build_report_view, report)
    click.echo(f"Report #{report.id}")
    click.echo(f"Session: {report.session_id}")
    click.echo(f"Received: {format_timestamp(report.timestamp)}")
    if view.session_timestamp:
        click.echo(f"Time: {view.session_timestamp}")
    if view.working_dir:
        click.echo(f"Directory: {view.working_dir}")

    if not view.is_structured:
        click.echo("\n" + view.raw_dump)
        return

    for entry in view.entries:
        click.echo(f"\n--- {role_label(entry.role)} ---")
        click.echo(entry.text)


@cli.command()
@click.argument("report_id")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Write to this file instead of stdout")
@click.pass_context
def export(ctx: click.Context, report_id: str, output: Path | None) -> None:
    """Export a report as line-delimited JSON."""
    from .transcripts.export import export_document

    report = _call(ctx.obj["store"].get_by_id, report_id)
    if report is None:
        raise click.ClickException(f"Report not found: {report_id}")

    content = _call(export_document, report.session_data, report.raw_jsonl)

    if output is None:
        click.echo(content)
        return

    output.write_text(content)
    click.echo(f"Wrote {output}", err=True)


@cli.command()
@click.argument("report_id")
@click.pass_context
def delete(ctx: click.Context, report_id: str) -> None:
    """Delete a report."""
    removed = _call(ctx.obj["store"].delete_by_id, report_id)
    if removed == 0:
        raise click.ClickException(f"Report not found: {report_id}")
    click.echo(f"Deleted report {report_id}")


@cli.command()
@click.pass_context
def init(ctx: click.Context) -> None:
    """Create the env file and an empty reports file."""
    config = ctx.obj["config"]

    if config.ensure_env_file():
        click.echo(f"Created {config.env_file}")
    else:
        click.echo(f"Env file: {config.env_file} (already exists)")

    if not config.data_file.exists():
        _call(ctx.obj["store"].list_all)  # initializes the file
        click.echo(f"Created {config.data_file}")
    else:
        click.echo(f"Data file: {config.data_file} (already exists)")


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the data file, report count, and configuration."""
    config = ctx.obj["config"]

    click.echo("Session Reports Status")
    click.echo("=" * 40)

    click.echo(f"\nData file: {config.data_file}")
    click.echo(f"  Exists: {config.data_file.exists()}")
    if config.data_file.exists():
        try:
            reports = ctx.obj["store"].list_all()
        except ReportError as e:
            click.echo(f"  ERROR: {e.message} ({e.details})")
        else:
            click.echo(f"  Reports: {len(reports)}")
            if reports:
                click.echo(f"  Newest: #{reports[0].id} at {reports[0].timestamp}")

    click.echo(f"\nEnv file: {config.env_file}")
    click.echo(f"  Exists: {config.env_file.exists()}")

    click.echo(f"\nServer: http://{config.host}:{config.port}")
    click.echo(f"Max upload: {config.max_content_length:,} bytes")
    click.echo(f"Log level: {config.log_level}")


def _call(func, *args):
    """Run a store or export call, turning report errors into CLI errors."""
    try:
        return func(*args)
    except ReportError as e:
        detail = f" ({e.details})" if e.details else ""
        raise click.ClickException(f"{e.message}{detail}") from e

