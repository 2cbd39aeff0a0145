"""SulfurWatch CLI — vessel sulfur-emission compliance ledger.

Commands:
  init                — create tables (optionally seed port states)
  register-vessel     — register or overwrite a vessel (admin)
  set-port-state      — assign a port-state label to a location (admin)
  import-port-states  — load location → label pairs from YAML (admin)
  record              — record a sulfur reading
  history             — show a vessel's readings
  alerts              — show compliance alerts
  status              — counts summary
  serve               — run the REST API
"""
from __future__ import annotations

import typer
from pathlib import Path
from typing import Optional
from rich.console import Console
from rich.table import Table

from sulfurwatch.errors import ComplianceError


app = typer.Typer(
    name="sulfurwatch",
    help="Vessel sulfur-emission compliance ledger.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
console = Console()


def _default_caller() -> Optional[str]:
    from sulfurwatch.config import settings
    return settings.ADMIN_IDENTITY


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command("init")
def init(
    port_states: Optional[Path] = typer.Option(
        None, "--port-states", help="YAML file of location: label pairs to import"
    ),
):
    """Create the database tables."""
    from sulfurwatch.database import init_db

    with console.status("[bold]Creating database..."):
        init_db()
    console.print("[green]Database ready.[/green]")
    if port_states is not None:
        import_port_states(path=port_states, caller=None)


@app.command("register-vessel")
def register_vessel(
    vessel_id: str = typer.Argument(..., help="IMO number or other unique identifier"),
    owner: str = typer.Option("", "--owner"),
    flag: str = typer.Option("", "--flag", help="Flag state code, e.g. PA"),
    caller: Optional[str] = typer.Option(None, "--caller", help="Acting identity (default: ADMIN_IDENTITY)"),
):
    """Register a vessel or overwrite its owner and flag state."""
    from sulfurwatch.database import SessionLocal
    from sulfurwatch.modules.vessel_directory import VesselDirectory

    db = SessionLocal()
    try:
        VesselDirectory(db).register(caller or _default_caller(), vessel_id, owner, flag)
        db.commit()
        console.print(f"[green]Registered {vessel_id}[/green] (owner {owner or '—'}, flag {flag or '—'})")
    except (ComplianceError, ValueError) as e:
        db.rollback()
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    finally:
        db.close()


@app.command("set-port-state")
def set_port_state(
    location: str = typer.Argument(..., help="Exact location string"),
    label: str = typer.Argument(..., help="Port-state label, e.g. EU"),
    caller: Optional[str] = typer.Option(None, "--caller", help="Acting identity (default: ADMIN_IDENTITY)"),
):
    """Assign the port-state label for a location."""
    from sulfurwatch.database import SessionLocal
    from sulfurwatch.modules.compliance_notifier import ComplianceNotifier

    db = SessionLocal()
    try:
        ComplianceNotifier(db).set_port_state(caller or _default_caller(), location, label)
        db.commit()
        console.print(f"[green]{location}[/green] → {label}")
    except ComplianceError as e:
        db.rollback()
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    finally:
        db.close()


@app.command("import-port-states")
def import_port_states(
    path: Optional[Path] = typer.Argument(None, help="YAML file (default: PORT_STATES_CONFIG)"),
    caller: Optional[str] = typer.Option(None, "--caller", help="Acting identity (default: ADMIN_IDENTITY)"),
):
    """Import port-state labels from YAML. All entries are imported or none."""
    import yaml
    from sulfurwatch.config import settings
    from sulfurwatch.database import SessionLocal
    from sulfurwatch.modules.compliance_notifier import ComplianceNotifier

    path = path or Path(settings.PORT_STATES_CONFIG)
    if not path.exists():
        console.print(f"[red]Port-state file not found: {path}[/red]")
        raise typer.Exit(1)
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    entries = data.get("port_states", data) if isinstance(data, dict) else None
    if not isinstance(entries, dict):
        console.print("[red]Expected a mapping of location: label[/red]")
        raise typer.Exit(1)

    db = SessionLocal()
    try:
        notifier = ComplianceNotifier(db)
        acting = caller or _default_caller()
        for location, label in entries.items():
            notifier.set_port_state(acting, str(location), str(label))
        db.commit()
        console.print(f"[green]Imported {len(entries)} port states[/green] from {path}")
    except ComplianceError as e:
        db.rollback()
        console.print(f"[red]Import failed, nothing imported: {e}[/red]")
        raise typer.Exit(1)
    finally:
        db.close()


@app.command("record")
def record(
    vessel_id: str = typer.Argument(...),
    sulfur_content: int = typer.Argument(..., min=0, help="Scaled units of 0.001 % m/m (100 = 0.10 %)"),
    position: str = typer.Option("", "--position", help="Location descriptor"),
    eca: bool = typer.Option(False, "--eca/--no-eca", help="Reading taken inside an ECA"),
):
    """Record a sulfur reading and alert if it breaches the limit."""
    from sulfurwatch.database import SessionLocal
    from sulfurwatch.modules.emission_ledger import EmissionLedger

    db = SessionLocal()
    try:
        reading = EmissionLedger(db).record_emission(vessel_id, sulfur_content, position, eca)
        if reading.is_compliant:
            console.print(f"[green]Compliant[/green] reading #{reading.reading_id} for {vessel_id}")
        else:
            console.print(
                f"[bold red]NON-COMPLIANT[/bold red] reading #{reading.reading_id} for {vessel_id} — alert raised"
            )
    except (ComplianceError, ValueError) as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    finally:
        db.close()


@app.command("history")
def history(vessel_id: str = typer.Argument(...)):
    """Show every reading recorded for a vessel, oldest first."""
    from sulfurwatch.database import SessionLocal
    from sulfurwatch.modules.emission_ledger import EmissionLedger

    db = SessionLocal()
    try:
        readings = EmissionLedger(db).get_history(vessel_id)
        if not readings:
            console.print(f"[yellow]No readings for {vessel_id}[/yellow]")
            return
        table = Table(title=f"Emission history — {vessel_id}")
        table.add_column("#", justify="right")
        table.add_column("Time (UTC)")
        table.add_column("Sulfur", justify="right")
        table.add_column("Position")
        table.add_column("ECA")
        table.add_column("Status")
        for r in readings:
            table.add_row(
                str(r.reading_id),
                r.timestamp_utc.strftime("%Y-%m-%d %H:%M:%S"),
                str(r.sulfur_content),
                r.position,
                "yes" if r.is_eca else "no",
                "[green]compliant[/green]" if r.is_compliant else "[red]non-compliant[/red]",
            )
        console.print(table)
    finally:
        db.close()


@app.command("alerts")
def alerts(vessel: Optional[str] = typer.Option(None, "--vessel", help="Only alerts for this vessel")):
    """Show compliance alerts in the order they were raised."""
    from sulfurwatch.database import SessionLocal
    from sulfurwatch.modules.compliance_notifier import ComplianceNotifier

    db = SessionLocal()
    try:
        rows = ComplianceNotifier(db).list_notifications(vessel_id=vessel)
        if not rows:
            console.print("[green]No compliance alerts[/green]")
            return
        table = Table(title="Compliance alerts")
        table.add_column("#", justify="right")
        table.add_column("Time (UTC)")
        table.add_column("Vessel")
        table.add_column("Message")
        table.add_column("Flag")
        table.add_column("Port state")
        for a in rows:
            table.add_row(
                str(a.alert_id),
                a.timestamp_utc.strftime("%Y-%m-%d %H:%M:%S"),
                a.vessel_id,
                a.message,
                a.flag_state or "—",
                a.port_state or "—",
            )
        console.print(table)
    finally:
        db.close()


@app.command("status")
def status():
    """Show registry counts."""
    from sulfurwatch.database import SessionLocal
    from sulfurwatch.modules.emission_ledger import EmissionLedger

    db = SessionLocal()
    try:
        ledger = EmissionLedger(db)
        vessels = ledger.directory.count()
        readings = ledger.count()
        breaches = ledger.count(compliant=False)
        alert_count = ledger.notifier.count()
        port_count = len(ledger.notifier.list_port_states())

        console.print("[bold]Registries[/bold]")
        console.print(f"  Vessels: {vessels:,}")
        console.print(f"  Port states: {port_count:,}")
        console.print(f"  Readings: {readings:,} ([red]{breaches:,} non-compliant[/red])")
        console.print(f"  Alerts: {alert_count:,}")
        if vessels == 0:
            console.print(
                "\n[yellow]No vessels yet. Run [cyan]sulfurwatch register-vessel[/cyan] to add one.[/yellow]"
            )
    finally:
        db.close()


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", "--host"),
    port: int = typer.Option(8000, "--port"),
):
    """Run the REST API."""
    import uvicorn

    console.print(f"API running at [cyan]http://{host}:{port}/docs[/cyan] — press Ctrl+C to stop")
    uvicorn.run("sulfurwatch.main:app", host=host, port=port)


if __name__ == "__main__":
    app()
