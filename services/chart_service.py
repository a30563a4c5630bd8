"""
services/chart_service.py
--------------------------
Draws the spending-by-category chart.
Uses matplotlib to render a donut chart and returns it as a PNG in a BytesIO buffer.
"""

import io
from typing import Sequence

import matplotlib
matplotlib.use("Agg")  # Non-interactive backend for server use
import matplotlib.pyplot as plt

from models.category import style_for
from models.subscription import SubscriptionRecord
from services.aggregates import AnalyticsPeriod, category_breakdown
from utils.logger import get_logger

logger = get_logger(__name__)

_BACKGROUND = "#1a1a2e"
_TEXT = "#e0e0e0"


class ChartService:
    """Generates visual charts for subscription spending."""

    def __init__(self, currency_symbol: str = "$"):
        self.currency_symbol = currency_symbol

    def generate_category_chart(
        self,
        records: Sequence[SubscriptionRecord],
        period: AnalyticsPeriod = AnalyticsPeriod.MONTH,
    ) -> io.BytesIO | None:
        """
        Donut chart of spend per category for the given period.

        Returns:
            BytesIO buffer with a PNG image, or None when there is no spend to draw.
        """
        rows = category_breakdown(records, period)
        if not rows:
            return None

        labels = [style_for(row.category).label for row in rows]
        values = [float(row.amount) for row in rows]
        colors = [style_for(row.category).color for row in rows]
        total = sum(values)

        fig, ax = plt.subplots(figsize=(8, 6), facecolor=_BACKGROUND)
        try:
            ax.set_facecolor(_BACKGROUND)

            wedges, _, autotexts = ax.pie(
                values,
                labels=None,
                autopct=lambda pct: f"{pct:.1f}%",
                colors=colors,
                startangle=90,
                pctdistance=0.78,
                wedgeprops=dict(width=0.45, edgecolor=_BACKGROUND, linewidth=2),
            )

            for autotext in autotexts:
                autotext.set_color("white")
                autotext.set_fontsize(10)
                autotext.set_fontweight("bold")

            legend_labels = [
                f"{label}: {self.currency_symbol}{value:.2f}" for label, value in zip(labels, values)
            ]
            legend = ax.legend(
                wedges, legend_labels,
                loc="center left",
                bbox_to_anchor=(1, 0, 0.5, 1),
                fontsize=10,
                frameon=False,
            )
            for text in legend.get_texts():
                text.set_color(_TEXT)

            title = "Monthly" if period is AnalyticsPeriod.MONTH else "Yearly"
            ax.set_title(
                f"{title} spending by category\nTotal: {self.currency_symbol}{total:.2f}",
                fontsize=14,
                fontweight="bold",
                color=_TEXT,
                pad=20,
            )

            plt.tight_layout()

            buf = io.BytesIO()
            fig.savefig(buf, format="png", dpi=150, bbox_inches="tight",
                        facecolor=fig.get_facecolor())
            buf.seek(0)
        finally:
            plt.close(fig)

        logger.info(f"Generated {period.value} category chart ({len(rows)} categories)")
        return buf
