"""
EcoReward CLI

Commands for inspecting and exercising the reward engine:
- config show: Show the reward parameters a deployment starts with
- calc: Compute a reward breakdown from raw inputs
- settle: Settle a file of verified submissions against in-memory services
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

import click
import yaml
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.table import Table

from ecoreward import __version__
from ecoreward.config import EngineSettings, load_settings
from ecoreward.distributor import RewardDistributor
from ecoreward.exceptions import EcoRewardError, SettlementError
from ecoreward.models import ImpactMetrics, RewardBreakdown, VerifiedSubmission
from ecoreward.reward.calculator import RewardCalculator
from ecoreward.services import (
    InMemoryTokenService,
    InMemoryVerificationService,
    ServiceDirectory,
    StaticStakingService,
)

console = Console()

FORMAT_OPTION = click.option(
    "--format", "fmt",
    type=click.Choice(["table", "json", "yaml"]),
    default="table",
    help="Output format (table, json, or yaml).",
)
SETTINGS_OPTION = click.option(
    "--settings", "settings_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML or JSON settings file. Defaults are used when omitted.",
)


def _output_json(data: object) -> None:
    """Print data as formatted JSON."""
    click.echo(json.dumps(data, indent=2, default=str))


def _output_yaml(data: object) -> None:
    """Print data as YAML."""
    click.echo(yaml.safe_dump(data, default_flow_style=False, sort_keys=False))


def _load(settings_path: Optional[str]) -> EngineSettings:
    if settings_path is None:
        return EngineSettings()
    try:
        return load_settings(settings_path)
    except EcoRewardError as exc:
        raise click.ClickException(str(exc)) from exc


def _error_message(exc: SettlementError) -> str:
    return f"{type(exc).__name__} ({exc.code}): {exc}"


def _load_submissions(path: Path) -> list[VerifiedSubmission]:
    """Read a list of submissions, or ``{"submissions": [...]}``, from a file."""
    try:
        with open(path) as f:
            if path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (OSError, yaml.YAMLError, json.JSONDecodeError) as exc:
        raise click.ClickException(f"Cannot read submissions from {path}: {exc}") from exc

    if isinstance(data, dict):
        data = data.get("submissions")
    if not isinstance(data, list):
        raise click.ClickException(f"{path} must contain a list of submissions")

    submissions = []
    for i, item in enumerate(data):
        try:
            submissions.append(VerifiedSubmission.model_validate(item))
        except ValidationError as exc:
            raise click.ClickException(f"Submission #{i} in {path} is invalid: {exc}") from exc
    return submissions


@click.group()
@click.version_option(__version__, prog_name="ecoreward")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="ERROR",
    help="Logging level for engine messages.",
)
def app(log_level: str):
    """Compute and settle rewards for verified farm data.

    Inspect reward parameters, preview reward breakdowns and run
    settlements against in-memory collaborator services.
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.group()
def config():
    """Inspect engine settings."""


@config.command("show")
@SETTINGS_OPTION
@FORMAT_OPTION
def config_show(settings_path: Optional[str], fmt: str):
    """Show the owner, reward parameters and collaborator addresses."""
    settings = _load(settings_path)
    data = settings.model_dump(mode="json")

    if fmt == "json":
        _output_json(data)
        return
    if fmt == "yaml":
        _output_yaml(data)
        return

    console.print("\n[bold blue]EcoReward Settings[/bold blue]\n")
    table = Table(box=box.ROUNDED)
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right")

    table.add_row("Owner", settings.owner)
    table.add_row("Genesis checkpoint", str(settings.genesis_checkpoint))
    table.add_row("Micro unit", f"{settings.micro_unit:,}")
    table.add_row("Max stake multiplier", str(settings.max_stake_multiplier))
    for name, value in settings.reward.model_dump().items():
        if name == "tier_multipliers":
            value = ", ".join(str(t) for t in value)
        table.add_row(name.replace("_", " ").capitalize(), str(value))
    for kind, address in settings.services.model_dump().items():
        table.add_row(f"{kind.capitalize()} service", address)
    table.add_row("Storage backend", settings.storage.backend)

    console.print(table)
    console.print()


def _print_breakdown(breakdown: RewardBreakdown) -> None:
    table = Table(box=box.ROUNDED, show_header=False)
    table.add_column("Step", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Quality score", str(breakdown.quality_score))
    table.add_row("Subtotal", f"{breakdown.subtotal:,}")
    table.add_row(
        "Tier",
        f"{breakdown.tier_index} ({breakdown.tier_multiplier}%)",
    )
    table.add_row("Tiered", f"{breakdown.tiered:,}")
    table.add_row("Stake multiplier", f"{breakdown.stake_multiplier}%")
    table.add_row("Final", f"{breakdown.final:,}")
    table.add_row("Micro unit", f"{breakdown.micro_unit:,}")
    style = "green" if breakdown.amount else "red"
    table.add_row("Amount", f"[{style}]{breakdown.amount:,}[/{style}]")
    console.print(table)


@app.command()
@click.option("--quality", type=int, required=True, help="Verified quality score (0-100).")
@click.option("--carbon", type=click.IntRange(min=0), default=0, help="Carbon sequestered.")
@click.option("--water", type=click.IntRange(min=0), default=0, help="Water saved.")
@click.option("--yield", "yield_increase", type=click.IntRange(min=0), default=0, help="Yield increase.")
@click.option("--stake", type=click.IntRange(min=0), default=100, help="Stake multiplier percentage (100 = 1.0x).")
@SETTINGS_OPTION
@click.option("--json", "json_flag", is_flag=True, help="Output as JSON.")
def calc(
    quality: int,
    carbon: int,
    water: int,
    yield_increase: int,
    stake: int,
    settings_path: Optional[str],
    json_flag: bool,
):
    """Compute the reward breakdown for one set of inputs."""
    settings = _load(settings_path)
    calculator = RewardCalculator(micro_unit=settings.micro_unit)
    metrics = ImpactMetrics(
        carbon_sequestered=carbon,
        water_saved=water,
        yield_increase=yield_increase,
    )
    try:
        breakdown = calculator.breakdown(quality, metrics, stake, settings.reward)
    except SettlementError as exc:
        raise click.ClickException(_error_message(exc)) from exc

    if json_flag:
        _output_json(breakdown.model_dump(mode="json", exclude_none=True))
        return

    console.print("\n[bold blue]Reward Breakdown[/bold blue]\n")
    _print_breakdown(breakdown)
    console.print()


@app.command()
@click.argument("submissions_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@SETTINGS_OPTION
@click.option("--stake", type=click.IntRange(min=0), default=100, help="Stake multiplier for every contributor.")
@click.option("--json", "json_flag", is_flag=True, help="Output as JSON.")
def settle(submissions_file: Path, settings_path: Optional[str], stake: int, json_flag: bool):
    """Settle every submission in SUBMISSIONS_FILE.

    SUBMISSIONS_FILE is a JSON or YAML list of verified submissions. They
    are settled in order against in-memory services, as the owner.
    """
    settings = _load(settings_path)
    submissions = _load_submissions(submissions_file)

    verifier = InMemoryVerificationService(submissions)
    token = InMemoryTokenService()
    directory = ServiceDirectory({
        settings.services.verification: verifier,
        settings.services.staking: StaticStakingService(default_multiplier=stake),
        settings.services.token: token,
    })
    distributor = RewardDistributor(settings=settings, directory=directory)

    results: list[dict[str, Any]] = []
    try:
        for submission in submissions:
            result: dict[str, Any] = {
                "submission_id": submission.submission_id,
                "contributor_id": submission.contributor_id,
            }
            try:
                result["amount"] = distributor.settle(submission.submission_id, settings.owner)
                result["status"] = "settled"
            except SettlementError as exc:
                result.update(amount=0, status="rejected", error=type(exc).__name__, code=exc.code)
            results.append(result)
        summary = distributor.summary()
    finally:
        distributor.close()

    if json_flag:
        _output_json({"results": results, "summary": summary})
        return

    console.print("\n[bold blue]Settlement Results[/bold blue]\n")
    table = Table(box=box.ROUNDED)
    table.add_column("Submission", style="cyan", no_wrap=True)
    table.add_column("Contributor")
    table.add_column("Amount", justify="right")
    table.add_column("Status")

    for r in results:
        if r["status"] == "settled":
            status = "[green]settled[/green]"
        else:
            status = f"[red]{r['error']} ({r['code']})[/red]"
        table.add_row(r["submission_id"], r["contributor_id"], f"{r['amount']:,}", status)

    console.print(table)
    console.print(
        f"\n  Settled: {summary['rewarded_submissions']}/{len(results)}"
        f"  Total distributed: {summary['total_distributed']:,}\n"
    )
