"""
services/export_service.py
---------------------------
Generates CSV and Excel exports of the subscription list.
"""

import io
from datetime import date
from typing import Sequence

import pandas as pd

from models.category import style_for
from models.subscription import SubscriptionRecord
from services.aggregates import AnalyticsPeriod, category_breakdown
from services.billing import days_until, monthly_amount, yearly_amount
from utils.logger import get_logger

logger = get_logger(__name__)

COLUMNS = [
    "ID", "Name", "Category", "Price", "Billing Cycle", "Monthly", "Yearly",
    "Next Billing Date", "Days Until", "Active", "Renewal", "Color", "Notes",
]


class ExportService:
    """Builds downloadable reports from a record snapshot."""

    def build_frame(self, records: Sequence[SubscriptionRecord], today: date) -> pd.DataFrame:
        """
        One row per subscription, in store order, including paused ones.

        Args:
            records: Snapshot from the store.
            today: Reference date for the "Days Until" column.
        """
        data = [
            {
                "ID": r.id,
                "Name": r.name,
                "Category": style_for(r.category).label,
                "Price": float(r.price),
                "Billing Cycle": r.billing_cycle.value,
                "Monthly": round(float(monthly_amount(r.price, r.billing_cycle)), 2),
                "Yearly": round(float(yearly_amount(r.price, r.billing_cycle)), 2),
                "Next Billing Date": r.next_billing_date.isoformat(),
                "Days Until": days_until(r.next_billing_date, today),
                "Active": r.is_active,
                "Renewal": r.repetition_type.value,
                "Color": r.color,
                "Notes": r.notes or "",
            }
            for r in records
        ]
        return pd.DataFrame(data, columns=COLUMNS)

    def build_category_summary(self, records: Sequence[SubscriptionRecord]) -> pd.DataFrame:
        """Monthly and derived yearly spend per category, largest first."""
        rows = [
            {
                "Category": style_for(row.category).label,
                "Subscriptions": row.count,
                "Monthly": round(float(row.amount), 2),
                "Yearly": round(float(row.amount * 12), 2),
                "Share %": round(float(row.percentage), 1),
            }
            for row in category_breakdown(records, AnalyticsPeriod.MONTH)
        ]
        return pd.DataFrame(rows, columns=["Category", "Subscriptions", "Monthly", "Yearly", "Share %"])

    def export_csv(self, records: Sequence[SubscriptionRecord], today: date) -> io.BytesIO:
        """
        Export subscriptions as CSV.

        Returns:
            A BytesIO buffer containing UTF-8 (with BOM) CSV data.
        """
        df = self.build_frame(records, today)
        buffer = io.BytesIO()
        df.to_csv(buffer, index=False, encoding="utf-8-sig")
        buffer.seek(0)
        logger.info(f"Exported {len(df)} subscriptions as CSV")
        return buffer

    def export_excel(self, records: Sequence[SubscriptionRecord], today: date) -> io.BytesIO:
        """
        Export subscriptions as an Excel workbook with a per-category summary sheet.

        Returns:
            A BytesIO buffer containing the .xlsx data.
        """
        df = self.build_frame(records, today)

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="Subscriptions", index=False)

            summary = self.build_category_summary(records)
            if not summary.empty:
                summary.to_excel(writer, sheet_name="By Category", index=False)

        buffer.seek(0)
        logger.info(f"Exported {len(df)} subscriptions as Excel")
        return buffer
