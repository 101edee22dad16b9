"""Example: Analyze a single asset from a directory of CSV bars."""

import asyncio
import sys
from datetime import datetime, timezone

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from technical_signals import CsvPriceSource, TechnicalAnalyzer, select_signals


console = Console()


def format_rsi(value: float) -> Text:
    """Color RSI by zone."""
    if value >= 70:
        color = "red"
    elif value <= 30:
        color = "green"
    else:
        color = "white"
    return Text(f"{value:.1f}", style=f"bold {color}")


def display_result(result):
    """Display an asset analysis with rich formatting."""
    short = result.key_signals.short_term
    medium = result.key_signals.medium_term
    long = result.key_signals.long_term

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Label", style="dim")
    table.add_column("Value")

    changes = result.changes
    price_text = Text()
    price_text.append(f"{result.last_price:,.4f} ", style="bold")
    price_text.append(f"(30m {changes.change_30min} / 1h {changes.change_1h} / 4h {changes.change_4h})")
    table.add_row("Price", price_text)

    # Short term
    table.add_row("RSI (14)", format_rsi(short.momentum.rsi.value))
    table.add_row("MACD", f"{short.momentum.macd.signal.value} ({short.momentum.macd.strength:.2f})")
    stoch = short.momentum.stochastic
    table.add_row("Stochastic", f"K {stoch.k:.1f} / D {stoch.d:.1f} {stoch.condition.value}")
    recent = ", ".join(p.type.value for p in short.patterns.recent) or "NONE"
    table.add_row("Patterns", recent)

    # Medium term
    trend = medium.trend
    table.add_row("Trend", f"{trend.direction.value} ({trend.strength:.2f})")
    tech = medium.technicals
    table.add_row("ADX", f"{tech.adx.value:.2f} trending={tech.adx.trending}")
    table.add_row("Cloud", f"{tech.ichimoku.signal.value} {tech.ichimoku.cloud_state.value}")
    table.add_row("ATR", f"{tech.atr.normalized:.2f}% {tech.atr.state.value}")

    table.add_row("Support / Resistance", f"{long.support:,.4f} / {long.resistance:,.4f}")
    table.add_row("Volatility", f"{result.volatility:.2f}")

    generated = datetime.fromtimestamp(result.timestamp / 1000, tz=timezone.utc)
    panel = Panel(
        table,
        title=Text(result.asset_id, style="bold white"),
        subtitle=f"Generated: {generated.strftime('%Y-%m-%d %H:%M:%S')} UTC",
        border_style="blue",
    )
    console.print(panel)

    console.print()
    console.rule("[bold blue]Balanced selection[/bold blue]")
    console.print_json(data=select_signals(result.key_signals, 2))
    console.rule(style="blue")


async def main(data_dir: str, asset: str):
    async with CsvPriceSource(data_dir) as source:
        analyzer = TechnicalAnalyzer(source)
        result = await analyzer.analyze_asset(asset)
        display_result(result)


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Usage: python analyze_single.py <DATA_DIR> <ASSET>")
        sys.exit(1)
    asyncio.run(main(sys.argv[1], sys.argv[2].upper()))
