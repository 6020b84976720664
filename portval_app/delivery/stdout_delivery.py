"""Standard output report delivery."""

import json
import sys
from datetime import datetime, timezone
from typing import Optional, TextIO

from ..config.report_delivery import StdoutDeliveryConfig
from ..models.market import ValuationReport
from .base import BaseReportDelivery

RULE = "-" * 70


def format_report(report: ValuationReport) -> str:
    """Render a report as the console portfolio table."""
    lines = [
        "",
        RULE,
        f"## {report.sequence_number} Market Data Update",
    ]
    lines.extend(f"{ticker} change to {price:.2f}" for ticker, price in report.market_prices.items())
    lines.append("## Portfolio")
    lines.append(f"{'symbol':<25} {'price':>10} {'qty':>15} {'value':>15}")
    lines.append(RULE)

    for line in report.positions:
        lines.append(
            f"{line.ticker:<25} {line.unit_price:>10.2f} "
            f"{line.effective_quantity:>15,d} {line.value:>15,.2f}"
        )

    lines.append(RULE)
    lines.append(f"Total portfolio value: {report.total_nav:,.2f}")
    lines.append(RULE)
    return "\n".join(lines)


class StdoutReportDelivery(BaseReportDelivery):
    """Prints each report as a table or a JSON line."""

    def __init__(
        self,
        name: str = "stdout",
        config: Optional[StdoutDeliveryConfig] = None,
        stream: Optional[TextIO] = None,
    ):
        super().__init__(name, config or StdoutDeliveryConfig())
        self.config: StdoutDeliveryConfig
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        # Resolved late so pytest's capsys sees the output
        return self._stream if self._stream is not None else sys.stdout

    def _emit(self, report: ValuationReport) -> None:
        print(self._format_report(report), file=self.stream, flush=True)

    def _format_report(self, report: ValuationReport) -> str:
        if self.config.format == "pretty":
            return format_report(report)

        payload = report.to_dict()
        if self.config.include_timestamp:
            payload["stdout_timestamp"] = datetime.now(timezone.utc).isoformat()
        return json.dumps(payload)

    def health_check(self) -> bool:
        """Check if the output stream is available."""
        try:
            return self.stream.writable()
        except (OSError, ValueError):
            return False
