"""
Output formatters for analysis, scan and advice results.

This module renders engine results as human-readable text reports and as
JSON documents. JSON output is produced by converting the result
dataclasses to plain dictionaries with ISO 8601 dates, enum values and
NaN/Infinity converted to null.
"""

import json
import logging
import math
from dataclasses import fields, is_dataclass
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Any

from ..models.core import AnalysisResult, Position, TradeAdvice


if TYPE_CHECKING:
    from ..scanner.scanner import ScanReport


logger = logging.getLogger(__name__)

RULE = "=" * 60
SUBRULE = "-" * 60


def to_serializable(value: Any) -> Any:
    """
    Convert a result value to JSON-compatible builtins.

    Dataclasses become dicts, dates ISO strings, enums their values and
    sequences lists. Non-finite floats become None.

    Examples:
        >>> from alpharank.models.core import ScoreHistoryItem
        >>> to_serializable(ScoreHistoryItem(date(2025, 1, 2), 7.1))
        {'date': '2025-01-02', 'score': 7.1}
    """
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_serializable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        return None
    if isinstance(value, dict):
        return {str(k): to_serializable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_serializable(item) for item in value]
    return value


def _analysis_to_dict(result: AnalysisResult, include_history: bool) -> dict:
    data = to_serializable(result)
    if not include_history:
        data.pop("history")
        if data["backtest"] is not None:
            data["backtest"].pop("equity_curve")
    return data


def format_analysis_text(result: AnalysisResult) -> str:
    """
    Format an analysis as a human-readable report.

    The report lists the score and tier, setup flags, the indicator
    breakdown, the risk plan, the trailing score history and the backtest
    summary.

    Args:
        result: AnalysisResult to format.

    Returns:
        Formatted text string.
    """
    lines = [RULE, f"ANALYSIS: {result.ticker}", RULE, ""]

    lines.append("SUMMARY")
    lines.append(SUBRULE)
    lines.append(f"Price:            {result.current_price:.2f} ({result.change_percent:+.2f}%)")
    if result.company_name:
        lines.append(f"Company:          {result.company_name}")
    if result.sector:
        lines.append(f"Sector:           {result.sector}")
    lines.append(f"Score:            {result.total_score:.1f} / 10")
    lines.append(f"Recommendation:   {result.recommendation.value}")
    setup = "ELITE PRIME" if result.is_prime_setup else "TREND ENTRY" if result.is_trend_entry else "None"
    lines.append(f"Setup:            {setup}")
    lines.append("")

    lines.append("INDICATORS")
    lines.append(SUBRULE)
    for indicator in result.indicators:
        marker = "+" if indicator.bullish else "-"
        lines.append(
            f"{marker} {indicator.name:<26} {indicator.score:>4.1f} x{indicator.weight:.2f}  "
            f"{indicator.value:<14} {indicator.description}"
        )
    lines.append("")

    risk = result.risk
    lines.append("RISK PLAN")
    lines.append(SUBRULE)
    lines.append(f"Entry:            {risk.entry_price:.2f} ({risk.entry_source})")
    lines.append(f"Stop Loss:        {risk.stop_loss:.2f} ({risk.stop_source})")
    lines.append(f"Take Profit:      {risk.take_profit:.2f} ({risk.target_source})")
    lines.append(f"Reward/Risk:      {risk.risk_reward_ratio:.1f}")
    lines.append(f"Thesis:           {risk.thesis}")
    lines.append("")

    if result.score_history:
        lines.append("SCORE HISTORY")
        lines.append(SUBRULE)
        for item in result.score_history:
            lines.append(f"{item.date.isoformat()}       {item.score:.1f}")
        lines.append("")

    backtest = result.backtest
    if backtest is not None:
        lines.append("BACKTEST")
        lines.append(SUBRULE)
        lines.append(f"Trades:           {backtest.total_trades}")
        lines.append(f"Win Rate:         {backtest.win_rate:.1f}%")
        lines.append(f"Strategy Return:  {backtest.total_return:.2f}%")
        lines.append(f"Buy & Hold:       {backtest.actual_return:.2f}%")
        lines.append(f"Alpha:            {backtest.alpha_return:+.2f}%")
        lines.append(f"Max Drawdown:     {backtest.max_drawdown:.2f}%")
        lines.append(f"Drawdown Avoided: {backtest.drawdown_avoided:+.2f} pts")
        lines.append(f"Status:           {backtest.current_status.value}")
        lines.append("")

    lines.append(RULE)
    return "\n".join(lines)


def format_analysis_json(result: AnalysisResult, include_history: bool = False) -> str:
    """
    Format an analysis as JSON.

    Args:
        result: AnalysisResult to format.
        include_history: Include the candle history and the backtest equity
            curve (large) when True.

    Returns:
        Pretty-printed JSON string.

    Examples:
        >>> data = json.loads(format_analysis_json(result))
        >>> data["recommendation"]
        'Buy'
    """
    return json.dumps(_analysis_to_dict(result, include_history), indent=2)


def format_scan_text(report: "ScanReport") -> str:
    """Format a scan report as a ranked table followed by any failures."""
    lines = [RULE, f"MARKET SCAN (benchmark: {report.benchmark_ticker})", RULE, ""]
    if not report.benchmark_loaded:
        lines.append("Benchmark unavailable: relative strength is neutral.")
        lines.append("")

    lines.append(f"{'Rank':<5} {'Ticker':<8} {'Score':>5}  {'Recommendation':<15} {'Setup':<12} {'Price':>10}")
    lines.append(SUBRULE)
    for rank, result in enumerate(report.results, start=1):
        setup = "PRIME" if result.is_prime_setup else "TREND" if result.is_trend_entry else ""
        lines.append(
            f"{rank:<5} {result.ticker:<8} {result.total_score:>5.1f}  "
            f"{result.recommendation.value:<15} {setup:<12} {result.current_price:>10.2f}"
        )
    if not report.results:
        lines.append("No results.")
    lines.append("")

    if report.failures:
        lines.append("FAILURES")
        lines.append(SUBRULE)
        for ticker, message in sorted(report.failures.items()):
            lines.append(f"{ticker}: {message}")
        lines.append("")
    if report.skipped:
        lines.append(f"Skipped (no data): {', '.join(report.skipped)}")
        lines.append("")

    lines.append(RULE)
    return "\n".join(lines)


def format_scan_json(report: "ScanReport") -> str:
    """Format a scan report as JSON with a compact entry per ticker."""
    data = {
        "benchmark_ticker": report.benchmark_ticker,
        "benchmark_loaded": report.benchmark_loaded,
        "results": [
            {
                "ticker": result.ticker,
                "total_score": result.total_score,
                "recommendation": result.recommendation.value,
                "is_prime_setup": result.is_prime_setup,
                "is_trend_entry": result.is_trend_entry,
                "current_price": to_serializable(result.current_price),
                "change_percent": to_serializable(result.change_percent),
            }
            for result in report.results
        ],
        "failures": dict(report.failures),
        "skipped": list(report.skipped),
    }
    return json.dumps(data, indent=2)


def format_advice_text(position: Position, advice: TradeAdvice) -> str:
    """Format trade advice for one position."""
    lines = [
        RULE,
        f"POSITION ADVICE: {position.ticker}",
        RULE,
        f"Entry Price:      {position.avg_entry_price:.2f}",
        f"Quantity:         {position.quantity:g}",
        f"P&L:              {advice.pnl_percentage:+.2f}%",
        f"Action:           {advice.action.value}",
        f"Reason:           {advice.reason}",
        f"Suggested Stop:   {advice.suggested_stop:.2f}",
        f"Suggested Target: {advice.suggested_target:.2f}",
        RULE,
    ]
    return "\n".join(lines)


def format_advice_json(position: Position, advice: TradeAdvice) -> str:
    """Format trade advice as JSON, nesting the position it refers to."""
    data = {"position": to_serializable(position), "advice": to_serializable(advice)}
    return json.dumps(data, indent=2)
