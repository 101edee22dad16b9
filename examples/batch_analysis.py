"""Example: Batch analyze several assets and print a plain summary."""

import asyncio
import sys

from technical_signals import CsvPriceSource, TechnicalAnalyzer


async def main(data_dir: str, assets: list[str]):
    async with CsvPriceSource(data_dir) as source:
        analyzer = TechnicalAnalyzer(source)
        print(f"Analyzing {len(assets)} assets...")
        batch_result = await analyzer.analyze_batch(assets)

        meta = batch_result.metadata
        print("\nBatch Summary:")
        print(f"  Total Processed: {meta.total_processed}")
        print(f"  Succeeded: {meta.success_count}")
        print(f"  Failed: {meta.failure_count}")
        print(f"  Processing Time: {meta.processing_time_ms}ms")

        print(f"\n{'Asset':<8} {'Price':>12} {'1h':>8} {'RSI':>6} {'Trend':<8} {'Vol':>6}")
        print("-" * 56)

        for r in batch_result.successful:
            short = r.key_signals.short_term
            trend = r.key_signals.medium_term.trend
            print(
                f"{r.asset_id:<8} {r.last_price:>12.4f} {r.changes.change_1h:>8} "
                f"{short.momentum.rsi.value:>6.1f} {trend.direction.value:<8} {r.volatility:>6.2f}"
            )

        if batch_result.has_failures:
            print("\nErrors encountered:")
            for err in batch_result.failed:
                print(f"  {err.asset_id}: {err.error}")


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Usage: python batch_analysis.py <DATA_DIR> <ASSET> [ASSET ...]")
        sys.exit(1)
    asyncio.run(main(sys.argv[1], [a.upper() for a in sys.argv[2:]]))
