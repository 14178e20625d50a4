# -*- coding: utf-8 -*-
"""
carbonprospect - Footprint assessment from the command line

Commands:
    assess      Run a full assessment from a JSON/YAML request file
    factors     List emission factors
    strategies  List reduction strategies for an industry
    classify    Classify mandatory reporting obligations
    project     Project cash flows for a capex/savings pair
    version     Show the installed version
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional

import typer
import yaml
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from carbonprospect import __version__
from carbonprospect.exceptions import CarbonProspectException
from carbonprospect.footprint.config import get_config
from carbonprospect.footprint.jurisdictions import jurisdiction_name, normalize_jurisdiction
from carbonprospect.footprint.models import AssessmentRequest, AssessmentResult
from carbonprospect.footprint.setup import FootprintService

app = typer.Typer(
    name="carbonprospect",
    help="Emissions accounting and reduction-scenario engine",
    no_args_is_help=True,
)
console = Console()


def _service() -> FootprintService:
    return FootprintService.from_defaults(get_config())


def _fail(message: str) -> None:
    console.print(f"[red]Error: {message}[/red]")
    raise typer.Exit(1)


def _load_request(input_path: Path) -> Dict[str, Any]:
    if not input_path.exists():
        _fail(f"Input file not found: {input_path}")
    with open(input_path, encoding="utf-8") as f:
        if input_path.suffix == ".json":
            data = json.load(f)
        elif input_path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        else:
            console.print(f"[red]Unsupported input format: {input_path.suffix}[/red]")
            console.print("[yellow]Use .json or .yaml files[/yellow]")
            raise typer.Exit(1)
    if not isinstance(data, dict):
        _fail("Input file must contain a mapping")
    return data


def _fmt(value: Any, suffix: str = "") -> str:
    if isinstance(value, (int, float)):
        return f"{value:,.2f}{suffix}"
    return str(value)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """CarbonProspect footprint engine."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _print_assessment(result: AssessmentResult) -> None:
    tonnes = result.inventory.to_tonnes()
    inventory_table = Table(title="Emissions Inventory (tCO2e)", box=box.ROUNDED)
    inventory_table.add_column("Scope", style="cyan")
    inventory_table.add_column("Component")
    inventory_table.add_column("tCO2e", justify="right")
    for scope in (1, 2, 3):
        for component, value in tonnes[f"scope{scope}"].items():
            if value:
                inventory_table.add_row(f"Scope {scope}", component, f"{value:,.3f}")
        inventory_table.add_row(
            f"Scope {scope}", "[bold]total[/bold]", f"[bold]{tonnes[f'scope{scope}_total']:,.3f}[/bold]",
        )
    inventory_table.add_row("All", "[bold]grand total[/bold]", f"[bold]{tonnes['grand_total']:,.3f}[/bold]")
    console.print(inventory_table)

    evaluation = result.evaluation
    if evaluation.evaluations:
        strategy_table = Table(title="Reduction Strategies", box=box.ROUNDED)
        for column in ("Rank", "Strategy", "Scope", "Reduction (t)", "ROI %", "Payback (yrs)"):
            strategy_table.add_column(column)
        for e in evaluation.evaluations:
            strategy_table.add_row(
                str(e.rank),
                e.name,
                str(e.scope),
                f"{e.reduction_potential / 1000:,.1f}",
                _fmt(e.roi_percent),
                _fmt(e.payback_years),
            )
        console.print(strategy_table)

    status = "[green]met[/green]" if evaluation.target_met else "[yellow]not met[/yellow]"
    financial = result.financial
    compliance = result.compliance
    summary = [
        f"Jurisdiction: {jurisdiction_name(result.jurisdiction_code)} ({result.jurisdiction_code})",
        f"Reduction target {evaluation.reduction_target_percent:.1f}%: {status}",
        f"NPV over {financial.horizon_years} years at {financial.discount_rate:.1%}: "
        f"{financial.npv:,.0f}",
        f"Payback year: {financial.payback_year if financial.payback_year is not None else 'beyond horizon'}",
        f"Mandatory reporting group: {compliance.mandatory_group}"
        + (f" ({compliance.rule_label})" if compliance.rule_label else ""),
    ]
    if result.benchmark.percentile_band:
        summary.append(f"Industry intensity band: {result.benchmark.percentile_band}")
    console.print(Panel("\n".join(summary), title="Summary", border_style="cyan"))

    for warning in result.warnings:
        console.print(f"[yellow]⚠ {warning}[/yellow]")


@app.command()
def assess(
    input_file: Path = typer.Argument(..., help="Assessment request (JSON/YAML)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the result as JSON"),
):
    """Run a full footprint assessment."""
    data = _load_request(input_file)
    try:
        request = AssessmentRequest.model_validate(data)
        result = _service().assess(request)
    except CarbonProspectException as exc:
        _fail(exc.message)
    except ValueError as exc:
        _fail(str(exc))

    _print_assessment(result)
    if output:
        output.write_text(result.model_dump_json(indent=2), encoding="utf-8")
        console.print(f"[green]✓[/green] Result written to {output}")


@app.command()
def factors(
    jurisdiction: Optional[str] = typer.Option(None, "--jurisdiction", "-j"),
    year: Optional[int] = typer.Option(None, "--year", "-y"),
    category: Optional[str] = typer.Option(None, "--category", "-c"),
):
    """List emission factors."""
    code = normalize_jurisdiction(jurisdiction) if jurisdiction else None
    rows = _service().factor_lookup.list_factors(code, year, category)
    table = Table(title="Emission Factors", box=box.ROUNDED)
    for column in ("Category", "Jurisdiction", "Year", "kgCO2e / unit", "Unit", "Source"):
        table.add_column(column)
    for f in rows:
        table.add_row(
            f.category, f.jurisdiction_code, str(f.year),
            f"{f.value_per_unit:g}", f.unit, f.source,
        )
    console.print(table)


@app.command()
def strategies(
    industry: str = typer.Option(..., "--industry", "-i", help="Industry key"),
):
    """List reduction strategies for an industry."""
    catalog = _service().catalog
    items = catalog.for_industry(industry)
    if not items:
        _fail(f"No strategies for industry '{industry}'. Known: {', '.join(catalog.industries())}")
    table = Table(title=f"Reduction Strategies: {industry}", box=box.ROUNDED)
    for column in ("Id", "Name", "Scope", "Timeframe", "Difficulty", "Capex", "Savings/yr"):
        table.add_column(column)
    for s in items:
        table.add_row(
            s.strategy_id, s.name, str(s.scope), s.timeframe_label, s.difficulty,
            f"{s.capex:,.0f}", f"{s.annual_opex_savings:,.0f}",
        )
    console.print(table)


@app.command()
def classify(
    jurisdiction: str = typer.Option(..., "--jurisdiction", "-j"),
    emissions_tonnes: float = typer.Option(..., "--emissions", "-e", help="Total tCO2e"),
    revenue: Optional[float] = typer.Option(None, "--revenue", "-r"),
    employees: Optional[int] = typer.Option(None, "--employees", "-n"),
    as_of: Optional[str] = typer.Option(None, "--as-of", help="YYYY-MM-DD"),
):
    """Classify mandatory reporting obligations."""
    try:
        when = date.fromisoformat(as_of) if as_of else None
    except ValueError:
        _fail(f"Invalid date: {as_of}")
    try:
        result = _service().classifier.classify(
            normalize_jurisdiction(jurisdiction), emissions_tonnes * 1000.0,
            revenue, employees, when,
        )
    except CarbonProspectException as exc:
        _fail(exc.message)

    if result.is_mandatory:
        console.print(
            f"[bold]Group {result.mandatory_group}[/bold]: {result.rule_label} "
            f"(since {result.effective_date.isoformat()})"
        )
    else:
        console.print(f"No mandatory reporting in {result.jurisdiction_code} as of {result.as_of}")
    for upcoming in result.upcoming:
        console.print(
            f"[yellow]Upcoming:[/yellow] group {upcoming.mandatory_group} "
            f"{upcoming.rule_label} from {upcoming.effective_date.isoformat()}"
        )


@app.command()
def project(
    capex: float = typer.Option(..., "--capex"),
    savings: float = typer.Option(..., "--savings"),
    horizon: Optional[int] = typer.Option(None, "--horizon"),
    rate: Optional[float] = typer.Option(None, "--rate", help="Discount rate, e.g. 0.05"),
):
    """Project discounted cash flows."""
    try:
        projection = _service().projector.project(capex, savings, horizon, rate)
    except CarbonProspectException as exc:
        _fail(exc.message)

    table = Table(title="Cash Flow Projection", box=box.ROUNDED)
    for column in ("Year", "Net", "Cumulative", "Discounted", "Cumulative NPV"):
        table.add_column(column, justify="right")
    for row in projection.rows:
        table.add_row(
            str(row.year),
            f"{row.net_cash_flow:,.0f}",
            f"{row.cumulative_cash_flow:,.0f}",
            f"{row.discounted_cash_flow:,.0f}",
            f"{row.cumulative_npv:,.0f}",
        )
    console.print(table)
    console.print(f"NPV: {projection.npv:,.2f}")


@app.command()
def version():
    """Show the installed version."""
    console.print(f"carbonprospect {__version__}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
