"""Command-line interface for the technical signals engine."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from rich.text import Text

from technical_signals.analyzer import TechnicalAnalyzer
from technical_signals.config import get_config
from technical_signals.errors import TechnicalAnalysisError
from technical_signals.models import (
    AssetAnalysis,
    BatchAnalysisResult,
    Condition,
    Series,
    TradeSignal,
    TrendDirection,
)
from technical_signals.selection import select_signals
from technical_signals.sources.csv_source import CsvPriceSource, load_bars_csv
from technical_signals.technicals.patterns import detect_patterns

console = Console()


def setup_logging(verbose: bool):
    """Configure logging based on verbosity."""
    config = get_config()
    logging.basicConfig(level=config.log_level.upper(), format=config.log_format)
    level = logging.DEBUG if verbose else logging.getLevelName(config.log_level.upper())
    logging.getLogger("technical_signals").setLevel(level)


SIGNAL_COLORS = {
    TradeSignal.BUY: "green",
    TradeSignal.SELL: "red",
    TrendDirection.BULLISH: "green",
    TrendDirection.BEARISH: "red",
    Condition.OVERSOLD: "green",
    Condition.OVERBOUGHT: "red",
}


def format_signal(value) -> Text:
    """Color a signal enum value."""
    return Text(value.value, style=SIGNAL_COLORS.get(value, "white"))


def format_change(change: str) -> Text:
    return Text(change, style="red" if change.startswith("-") else "green")


def display_batch_results(results: list[AssetAnalysis]):
    """Display successful analyses as a table."""
    table = Table(title="Technical Signals", show_lines=True)

    table.add_column("Asset", style="bold")
    table.add_column("Price", justify="right")
    table.add_column("30min", justify="right")
    table.add_column("1h", justify="right")
    table.add_column("RSI", justify="right")
    table.add_column("MACD", justify="center")
    table.add_column("Trend", justify="center")
    table.add_column("Patterns")
    table.add_column("Volatility", justify="right")

    for r in results:
        short = r.key_signals.short_term
        medium = r.key_signals.medium_term
        patterns = ", ".join(p.type.value for p in short.patterns.recent) or "-"
        table.add_row(
            r.asset_id,
            f"{r.last_price:,.4f}",
            format_change(r.changes.change_30min),
            format_change(r.changes.change_1h),
            Text(f"{short.momentum.rsi.value:.1f}"),
            format_signal(short.momentum.macd.signal),
            format_signal(medium.trend.direction),
            patterns,
            f"{r.volatility:.2f}",
        )

    console.print(table)


def display_summary(result: BatchAnalysisResult):
    meta = result.metadata
    summary_text = (
        f"Total: {meta.total_processed} | "
        f"Succeeded: {meta.success_count} | "
        f"Failed: {meta.failure_count} | "
        f"Time: {meta.processing_time_ms}ms"
    )
    console.print(Panel(summary_text, title="Batch Summary", border_style="blue"))


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging")
@click.pass_context
def main(ctx, verbose):
    """Technical Signals - multi-timeframe technical analysis."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging(verbose)


@main.command()
@click.argument("assets", nargs=-1, required=True)
@click.option(
    "--data-dir",
    "-d",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    required=True,
    help="Directory of <ASSET>_<timeframe>.csv files",
)
@click.option(
    "--period",
    "-p",
    type=click.IntRange(0, 5, clamp=True),
    default=None,
    help="Reduce key signals by horizon preference (0 short-term .. 5 medium-term)",
)
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def analyze(ctx, assets: tuple[str, ...], data_dir: Path, period: Optional[int], json_output: bool):
    """Analyze one or more assets from CSV price data."""

    async def run() -> BatchAnalysisResult:
        async with CsvPriceSource(data_dir) as source:
            analyzer = TechnicalAnalyzer(source)
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
                transient=True,
            ) as progress:
                progress.add_task(f"Analyzing {len(assets)} assets...", total=None)
                return await analyzer.analyze_batch(list(assets))

    result = asyncio.run(run())

    if json_output:
        payload = result.to_json_dict()
        if period is not None:
            for analysis, raw in zip(result.successful, payload["successful"]):
                raw["keySignals"] = select_signals(analysis.key_signals, period)
        console.print_json(json.dumps(payload))
        return

    display_summary(result)
    if result.successful:
        display_batch_results(result.successful)

    if period is not None:
        for analysis in result.successful:
            console.print(Panel(
                json.dumps(select_signals(analysis.key_signals, period), indent=2),
                title=f"{analysis.asset_id} selected signals (period={period})",
                border_style="cyan",
            ))

    if result.failed:
        console.print("\n[red]Errors:[/red]")
        for err in result.failed:
            console.print(f"  {err.asset_id}: {err.error}")


@main.command()
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--limit", "-n", type=int, default=None, help="Show at most this many patterns")
@click.pass_context
def patterns(ctx, csv_file: Path, limit: Optional[int]):
    """Detect candlestick patterns in a CSV of bars."""
    try:
        bars = load_bars_csv(csv_file)
    except TechnicalAnalysisError as e:
        raise click.ClickException(str(e)) from e

    series = Series.from_bars(bars, asset=csv_file.stem)
    found = detect_patterns(series, limit=limit)

    if not found:
        console.print("[dim]No patterns detected[/dim]")
        return

    table = Table(title=f"Patterns in {csv_file.name}")
    table.add_column("Bar", justify="right")
    table.add_column("Time")
    table.add_column("Pattern", style="bold")
    table.add_column("Strength", justify="right")

    for p in found:
        table.add_row(
            str(p.position),
            series[p.position].timestamp.strftime("%Y-%m-%d %H:%M"),
            p.type.value,
            f"{p.strength:.2f}",
        )

    console.print(table)


if __name__ == "__main__":
    main()
