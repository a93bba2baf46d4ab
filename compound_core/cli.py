from __future__ import annotations

import dataclasses
import datetime as dt
import json
import math
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from compound_core.domain.errors import BudgetHierarchyError, InvalidStoreError
from compound_core.domain.models import BudgetStore, ReportConfig
from compound_core.io import config as config_io
from compound_core.io import store as store_io
from compound_core.log import configure_logging
from compound_core.services import budget, goals as goal_service, linked_items, mortgage as mortgage_service
from compound_core.services import housing, payday as payday_service, pipeline, snapshot, timeline
from compound_core.services.growth import cumulative_savings
from compound_core.services.investments import average_return_rate

app = typer.Typer(help="Compound CLI for budget breakdowns and wealth projections.")
console = Console()


def _save_json(path: Path, payload):
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, default=str)


def _money(value: float) -> str:
    if math.isinf(value):
        return "never"
    return f"{value:,.2f}"


def _parse_now(raw: Optional[str]) -> dt.datetime:
    if not raw:
        return dt.datetime.now(dt.timezone.utc)
    return snapshot.as_utc(dt.datetime.fromisoformat(raw))


def _bootstrap(config: Optional[Path], log_level: Optional[str]) -> ReportConfig:
    cfg = config_io.load_report_config(config)
    configure_logging(log_level or cfg.log_level, json_output=cfg.json_logs)
    return cfg


def _load(path: Path) -> BudgetStore:
    try:
        return store_io.load_store(path)
    except (FileNotFoundError, InvalidStoreError) as exc:
        typer.echo(f"Could not load store: {exc}", err=True)
        raise typer.Exit(code=1)


@app.command()
def summary(
    store: Path = typer.Option(..., help="Store JSON ({version, data, lastUpdated})"),
    now: Optional[str] = typer.Option(None, help="ISO timestamp to treat as now (default: current time)"),
    config: Optional[Path] = typer.Option(None, help="Report config JSON"),
    log_level: Optional[str] = typer.Option(None, help="Log level override"),
    out: Optional[Path] = typer.Option(None, help="Write the summary as JSON"),
):
    """Weekly budget, current wealth and milestone projections."""
    _bootstrap(config, log_level)
    data = _load(store)
    try:
        result = pipeline.summarize_store(data, _parse_now(now))
    except BudgetHierarchyError as exc:
        typer.echo(f"Budget hierarchy error: {exc}", err=True)
        raise typer.Exit(code=1)

    if out:
        _save_json(out, dataclasses.asdict(result))
        typer.echo(f"Summary written to {out}")
        return

    table = Table(title="Weekly budget")
    table.add_column("Category")
    table.add_column("Flat", justify="right")
    table.add_column("Effective", justify="right")
    flat = result.weekly_by_category.as_dict()
    for category, amount in result.weekly_by_category_effective.as_dict().items():
        table.add_row(category, _money(flat[category]), _money(amount))
    console.print(table)
    colour = "green" if result.uncommitted_income >= 0 else "red"
    console.print(f"Uncommitted: [{colour}]{_money(result.uncommitted_income)}[/{colour}] / week")
    console.print(
        f"Investments {_money(result.investment_value)} | Mortgage {_money(result.mortgage_balance)} | "
        f"Equity {_money(result.equity)}"
    )
    for label, w in result.milestones.items():
        console.print(f"  {label:>10} (age {w.age}): net {_money(w.net_wealth)}, real {_money(w.net_wealth_real)}")
    if result.emergency_fund_target:
        console.print(f"Emergency fund target: {_money(result.emergency_fund_target)}")


@app.command("budget")
def budget_cmd(
    store: Path = typer.Option(..., help="Store JSON ({version, data, lastUpdated})"),
    include_linked: bool = typer.Option(True, help="Include items mirrored from investments, buckets and housing"),
    log_level: Optional[str] = typer.Option(None, help="Log level override"),
):
    """Budget items grouped under their parents, with effective weekly amounts."""
    _bootstrap(None, log_level)
    data = _load(store)
    items = linked_items.build_complete_budget_items(data) if include_linked else data.budget_items
    try:
        budget.validate_hierarchy(items)
        totals = budget.calculate_weekly_by_category_effective(items)
    except BudgetHierarchyError as exc:
        typer.echo(f"Budget hierarchy error: {exc}", err=True)
        raise typer.Exit(code=1)

    index = budget.children_index(items)
    table = Table(title="Budget")
    table.add_column("Item")
    table.add_column("Category")
    table.add_column("Weekly", justify="right")
    for depth, item in budget.walk_hierarchy(items):
        marker = " (auto)" if budget.is_auto_calculated(item, index) else ""
        linked = f" -> {item.linked_to_type}" if item.linked_to_type else ""
        indent = "  " * depth
        table.add_row(
            f"{indent}{item.name}{marker}{linked}",
            item.category,
            _money(budget.get_effective_weekly_amount(item, items, index)),
        )
    console.print(table)
    income = data.settings.after_tax_weekly_income
    console.print(f"Committed {_money(totals.total)} of {_money(income)}; uncommitted {_money(income - totals.total)}")


@app.command()
def wealth(
    store: Path = typer.Option(..., help="Store JSON ({version, data, lastUpdated})"),
    config: Optional[Path] = typer.Option(None, help="Report config JSON"),
    log_level: Optional[str] = typer.Option(None, help="Log level override"),
    out: Optional[Path] = typer.Option(None, help="Write the timeline (.csv or .json)"),
):
    """Year-by-year real net wealth from today to retirement."""
    cfg = _bootstrap(config, log_level)
    data = _load(store)
    s = data.settings
    property_value = sum(m.property_value or 0.0 for m in data.mortgages)
    result = timeline.generate_wealth_projection(
        s.age, s.retirement_age, data.investments, data.mortgages, property_value, s.inflation_rate
    )

    if out:
        if out.suffix.lower() == ".csv":
            out.parent.mkdir(parents=True, exist_ok=True)
            timeline.timeline_frame(result).to_csv(out)
        else:
            _save_json(out, result.to_records())
        typer.echo(f"Timeline written to {out}")
        return

    table = Table(title="Wealth projection (today's dollars)")
    for col in ("Age", "Investments", "Property", "Debt", "Net"):
        table.add_column(col, justify="right")
    for p in result.points:
        table.add_row(str(p.age), _money(p.investments), _money(p.property), _money(p.debt), _money(p.net_wealth))
    console.print(table)

    weekly = sum(inv.weekly_contribution for inv in data.investments)
    horizon = s.retirement_age - s.age
    if weekly and horizon > 0:
        avg = average_return_rate(data.investments)
        years = sorted({y for y in (*cfg.milestone_years, horizon) if y <= horizon})
        rows = cumulative_savings(weekly, avg, max(years))
        console.print(f"\nCumulative contributions at {avg:.1f}%:")
        for row in rows:
            if row.year in years:
                console.print(f"  {row.year:>3}y  {_money(row.nominal)} ({_money(row.contributed)} contributed)")


@app.command("mortgage")
def mortgage_cmd(
    store: Path = typer.Option(..., help="Store JSON ({version, data, lastUpdated})"),
    now: Optional[str] = typer.Option(None, help="ISO timestamp to treat as now (default: current time)"),
    config: Optional[Path] = typer.Option(None, help="Report config JSON"),
    extra: Optional[float] = typer.Option(None, help="Extra weekly payment to evaluate"),
    schedule: bool = typer.Option(False, help="Print the yearly amortization schedule"),
    log_level: Optional[str] = typer.Option(None, help="Log level override"),
):
    """Payoff timeline and the effect of paying extra each week."""
    cfg = _bootstrap(config, log_level)
    data = _load(store)
    when = _parse_now(now)
    extra_amount = cfg.extra_payment_what_if if extra is None else extra

    if not data.mortgages:
        typer.echo("No mortgages in store.")
        return

    for m in data.mortgages:
        current = snapshot.project_current_mortgage_balance(m, when)
        payoff = mortgage_service.calculate_mortgage_payoff(m, as_of=when.date())
        console.print(f"[bold]{m.name}[/bold]: balance {_money(current.projected_balance)}")
        if not payoff.is_payable:
            console.print("  [red]Payments do not cover interest; this loan is never repaid.[/red]")
            continue
        years, months = divmod(int(payoff.months_remaining), 12)
        console.print(
            f"  Paid off in {years}y {months}m ({payoff.payoff_date.isoformat()}), "
            f"interest {_money(payoff.total_interest)}"
        )
        impact = mortgage_service.mortgage_extra_payment_impact(m, extra_amount)
        console.print(
            f"  +{_money(extra_amount)}/week saves {int(impact.months_saved)} months and "
            f"{_money(impact.interest_saved)} interest"
        )
        if schedule:
            table = Table(title=f"{m.name} schedule")
            for col in ("Year", "Paid", "Interest", "Principal", "Balance"):
                table.add_column(col, justify="right")
            for row in mortgage_service.yearly_schedule(mortgage_service.amortization_schedule(m)):
                table.add_row(
                    str(int(row["year"])),
                    _money(row["payment"]),
                    _money(row["interest"]),
                    _money(row["principal"]),
                    _money(row["balance"]),
                )
            console.print(table)


@app.command("goals")
def goals_cmd(
    store: Path = typer.Option(..., help="Store JSON ({version, data, lastUpdated})"),
    now: Optional[str] = typer.Option(None, help="ISO timestamp to treat as now (default: current time)"),
    log_level: Optional[str] = typer.Option(None, help="Log level override"),
):
    """Goal progress and savings bucket timelines."""
    _bootstrap(None, log_level)
    data = _load(store)
    when = _parse_now(now)

    for g in goal_service.evaluate_goals(data, when):
        line = f"{g.name} ({g.type}): {_money(g.current_amount)} / {_money(g.target_amount)} ({g.progress_pct:.0f}%)"
        if g.weekly_needed:
            line += f", save {_money(g.weekly_needed)}/week"
        console.print(line)
    for bucket in data.savings_buckets:
        p = goal_service.bucket_progress(bucket, when)
        eta = "no contribution" if p.weeks_to_target is None else f"{p.weeks_to_target} weeks to go"
        console.print(f"{p.name}: {_money(p.projected_amount)} / {_money(p.target_amount)} ({p.progress_pct:.0f}%), {eta}")


@app.command("housing")
def housing_cmd(
    store: Path = typer.Option(..., help="Store JSON ({version, data, lastUpdated})"),
    log_level: Optional[str] = typer.Option(None, help="Log level override"),
):
    """Income-proportional split of shared housing costs."""
    _bootstrap(None, log_level)
    data = _load(store)
    shared = data.shared_housing
    if shared is None or not shared.enabled:
        typer.echo("Shared housing is not enabled.")
        return
    split = housing.calculate_shared_housing(shared, data.settings.after_tax_weekly_income)
    table = Table(title=f"Shared housing (you {split.your_ratio:.0%} / partner {split.partner_ratio:.0%})")
    for col in ("Expense", "Weekly", "You", "Partner"):
        table.add_column(col, justify="right")
    for line in split.expenses:
        table.add_row(line.name, _money(line.weekly_amount), _money(line.your_share), _money(line.partner_share))
    table.add_row("Total", _money(split.total_weekly), _money(split.your_share), _money(split.partner_share))
    console.print(table)


def _parse_adjustments(raw: List[str]) -> dict:
    adjustments = {}
    for entry in raw:
        key, sep, value = entry.partition("=")
        if not sep:
            raise typer.BadParameter(f"Expected ITEM_ID=AMOUNT, got {entry!r}")
        adjustments[key.strip()] = float(value)
    return adjustments


@app.command("payday")
def payday_cmd(
    store: Path = typer.Option(..., help="Store JSON ({version, data, lastUpdated})"),
    frequency: Optional[str] = typer.Option(None, help="Pay frequency (defaults to the stored setting, else weekly)"),
    adjust: List[str] = typer.Option([], help="Override a transfer: ITEM_ID=AMOUNT"),
    apply: bool = typer.Option(False, help="Record the new balances in the store"),
    now: Optional[str] = typer.Option(None, help="ISO timestamp to treat as now (default: current time)"),
    log_level: Optional[str] = typer.Option(None, help="Log level override"),
    out: Optional[Path] = typer.Option(None, help="Where to write the updated store (default: overwrite --store)"),
):
    """Savings transfers for this pay period."""
    _bootstrap(None, log_level)
    data = _load(store)
    when = _parse_now(now)
    pay_frequency = frequency or data.settings.pay_frequency or "weekly"
    plan = payday_service.allocate_payday(data, pay_frequency, _parse_adjustments(adjust))

    for line in plan.lines:
        console.print(f"{line.name}: {_money(line.period_amount)} ({_money(line.weekly_amount)}/week)")
    for target_id, balance in plan.new_balances.items():
        console.print(f"  {target_id} -> {_money(balance)}")

    if apply:
        target = out or store
        store_io.save_store(target, payday_service.apply_payday(data, plan, when), when)
        typer.echo(f"Store updated at {target}")


@app.command("export-data")
def export_data(
    store: Path = typer.Option(..., help="Store JSON ({version, data, lastUpdated})"),
    out: Path = typer.Option(..., help="Backup file to write"),
    now: Optional[str] = typer.Option(None, help="ISO timestamp to treat as now (default: current time)"),
):
    """Write a portable backup of the store."""
    data = _load(store)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(store_io.export_data(data, _parse_now(now)), encoding="utf-8")
    typer.echo(f"Backup written to {out}")


@app.command("import-data")
def import_data(
    backup: Path = typer.Option(..., help="Backup file produced by export-data"),
    dest: Path = typer.Option(..., help="Store JSON to create or replace"),
    now: Optional[str] = typer.Option(None, help="ISO timestamp to treat as now (default: current time)"),
):
    """Validate a backup and save it as the store. The destination is untouched on failure."""
    try:
        data = store_io.import_data(backup.read_text(encoding="utf-8"))
    except (OSError, InvalidStoreError) as exc:
        typer.echo(f"Import failed: {exc}", err=True)
        raise typer.Exit(code=1)
    store_io.save_store(dest, data, _parse_now(now))
    typer.echo(f"Imported {len(data.budget_items)} budget items into {dest}")


if __name__ == "__main__":
    app()
