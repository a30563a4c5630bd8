"""
services/subscription_service.py
--------------------------------
Application service between the bot handlers and the subscription store.

Responsibilities:
    - Parse and validate raw user input into SubscriptionRecord fields.
    - Run the renewal advancer opportunistically before every read.
    - Render store contents and aggregates as chat messages.
"""

import re
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Callable, Optional

from models.category import style_for
from models.subscription import (
    COLORS,
    BillingCycle,
    RepetitionType,
    SubscriptionCategory,
    SubscriptionRecord,
    SubscriptionValidationError,
)
from repositories.subscription_store import SubscriptionStore
from services import aggregates
from services.aggregates import AnalyticsPeriod
from services.billing import days_until, is_overdue, monthly_amount
from utils.logger import get_logger

logger = get_logger(__name__)

SHORT_ID_LENGTH = 8
NO_DATA = "N/A"

EDITABLE_FIELDS = ("name", "price", "cycle", "category", "date", "repeat", "color", "notes")


# ── INPUT PARSING ─────────────────────────────────────────

# An optional leading currency symbol, then digits with at most one decimal separator.
_PRICE_PATTERN = re.compile(r"[$€£¥]?\s*(\d+(?:[.,]\d+)?)")


def parse_price(text: str) -> Decimal:
    """
    Parse a user-typed price such as "15.99", "$15.99" or "15,99".

    Anything else (signs, exponents, thousands separators, extra words)
    is rejected rather than reinterpreted.

    Raises:
        SubscriptionValidationError: If the text is not a non-negative number.
    """
    match = _PRICE_PATTERN.fullmatch((text or "").strip())
    if match is None:
        raise SubscriptionValidationError(f"'{text}' is not a valid price.")
    return Decimal(match.group(1).replace(",", "."))


def _parse_choice(text: str, enum_cls, label: str):
    value = (text or "").strip().lower()
    try:
        return enum_cls(value)
    except ValueError:
        options = ", ".join(member.value for member in enum_cls)
        raise SubscriptionValidationError(f"Unknown {label} '{text}'. Use one of: {options}.")


def parse_billing_cycle(text: str) -> BillingCycle:
    return _parse_choice(text, BillingCycle, "billing cycle")


def parse_category(text: str) -> SubscriptionCategory:
    return _parse_choice(text, SubscriptionCategory, "category")


def parse_repetition_type(text: str) -> RepetitionType:
    value = (text or "").strip().lower()
    if value in {"off", "none", "no"}:
        return RepetitionType.DISABLED
    return _parse_choice(value, RepetitionType, "repetition")


def parse_date(text: str) -> date:
    try:
        return date.fromisoformat((text or "").strip())
    except ValueError:
        raise SubscriptionValidationError(f"'{text}' is not a date. Use YYYY-MM-DD.")


def parse_color(text: str) -> str:
    value = (text or "").strip().lower()
    if value not in COLORS:
        raise SubscriptionValidationError(f"Unknown color '{text}'. Use one of: {', '.join(COLORS)}.")
    return value


def short_id(record: SubscriptionRecord) -> str:
    return record.id[:SHORT_ID_LENGTH]


class SubscriptionService:
    """
    Handles all subscription use cases for the bot.

    Args:
        store: The loaded record store.
        clock: Returns today's date; injectable for tests.
        upcoming_window_days: Window for the upcoming list.
        currency_symbol: Display prefix for amounts.
    """

    def __init__(
        self,
        store: SubscriptionStore,
        clock: Callable[[], date] = date.today,
        upcoming_window_days: int = aggregates.DEFAULT_UPCOMING_WINDOW_DAYS,
        currency_symbol: str = "$",
    ):
        self.store = store
        self.clock = clock
        self.upcoming_window_days = upcoming_window_days
        self.currency_symbol = currency_symbol

    # ── LIFECYCLE ─────────────────────────────────────────

    def refresh(self) -> date:
        """Catch overdue auto-renewing records up to today and return today."""
        today = self.clock()
        self.store.process_auto_renewals(today)
        return today

    def current_records(self) -> tuple[SubscriptionRecord, ...]:
        self.refresh()
        return self.store.records

    # ── COMMANDS ──────────────────────────────────────────

    def add_manual(
        self,
        name: str,
        price: str,
        billing_cycle: str,
        category: Optional[str] = None,
        next_billing_date: Optional[str] = None,
        repetition: Optional[str] = None,
        color: Optional[str] = None,
        notes: str = "",
    ) -> dict:
        """
        Validate raw fields and add a subscription.

        Missing optional fields default to category "other", today's date,
        monthly renewal and the blue color tag.

        Returns:
            Dict with 'success' and 'message' keys.
        """
        try:
            record = SubscriptionRecord(
                name=(name or "").strip(),
                price=parse_price(price),
                billing_cycle=parse_billing_cycle(billing_cycle),
                category=parse_category(category) if category else SubscriptionCategory.OTHER,
                next_billing_date=parse_date(next_billing_date) if next_billing_date else self.clock(),
                repetition_type=parse_repetition_type(repetition) if repetition else RepetitionType.MONTHLY,
                color=parse_color(color) if color else "blue",
                notes=(notes or "").strip(),
            )
        except SubscriptionValidationError as e:
            logger.info(f"Rejected new subscription: {e}")
            return {"success": False, "message": f"⚠️ {e}"}

        saved = self.store.add(record)
        today = self.refresh()
        saved = self.store.get(saved.id) or saved
        return {"success": True, "message": "✅ Subscription added:\n" + self._detail(saved, today)}

    def edit_subscription(self, id_prefix: str, changes: dict[str, str]) -> str:
        """
        Apply user edits to a subscription.

        Args:
            id_prefix: Id or unambiguous id prefix.
            changes: Field name (see EDITABLE_FIELDS) to raw value.
        """
        record = self.store.find(id_prefix)
        if record is None:
            return f"⚠️ No subscription matches '{id_prefix}'."
        if not changes:
            return f"⚠️ Nothing to change. Editable fields: {', '.join(EDITABLE_FIELDS)}."

        parsers = {
            "name": ("name", lambda v: v.strip()),
            "price": ("price", parse_price),
            "cycle": ("billing_cycle", parse_billing_cycle),
            "category": ("category", parse_category),
            "date": ("next_billing_date", parse_date),
            "repeat": ("repetition_type", parse_repetition_type),
            "color": ("color", parse_color),
            "notes": ("notes", lambda v: v.strip()),
        }
        try:
            fields = {}
            for key, raw in changes.items():
                if key not in parsers:
                    raise SubscriptionValidationError(
                        f"Unknown field '{key}'. Editable fields: {', '.join(EDITABLE_FIELDS)}."
                    )
                attr, parse = parsers[key]
                fields[attr] = parse(raw)
            updated = replace(record, **fields)
        except SubscriptionValidationError as e:
            return f"⚠️ {e}"

        self.store.update(updated)
        today = self.refresh()
        current = self.store.get(updated.id) or updated
        return "✏️ Subscription updated:\n" + self._detail(current, today)

    def delete_subscription(self, id_prefix: str) -> str:
        record = self.store.find(id_prefix)
        if record is None or not self.store.delete(record):
            return f"⚠️ No subscription matches '{id_prefix}'."
        return f"🗑️ Deleted {record.name}."

    def toggle_subscription(self, id_prefix: str) -> str:
        record = self.store.find(id_prefix)
        toggled = self.store.toggle_active(record) if record else None
        if toggled is None:
            return f"⚠️ No subscription matches '{id_prefix}'."
        self.refresh()
        state = "resumed ▶️" if toggled.is_active else "paused ⏸️"
        return f"{toggled.name} {state}"

    def renew_now(self) -> str:
        """Run the renewal advancer on demand."""
        changed = self.store.process_auto_renewals(self.clock())
        if not changed:
            return "👌 All billing dates are current."
        return f"🔁 Advanced {changed} overdue subscription(s) to their next billing date."

    # ── VIEWS ─────────────────────────────────────────────

    def list_subscriptions(self, query: str = "", category: Optional[str] = None) -> str:
        """Active subscriptions, optionally filtered by name and category, sorted by name."""
        try:
            cat = parse_category(category) if category else None
        except SubscriptionValidationError as e:
            return f"⚠️ {e}"

        records = self.current_records()
        today = self.clock()
        matches = aggregates.search_records(records, query, cat)
        if not matches:
            return "📭 No subscriptions found."

        lines = ["📋 Subscriptions:\n"]
        lines.extend(self._row(r, today) for r in matches)
        paused = len(records) - len(aggregates.active_records(records))
        if paused:
            lines.append(f"\n⏸️ {paused} paused subscription(s) not shown.")
        return "\n".join(lines)

    def dashboard(self) -> str:
        records = self.current_records()
        today = self.clock()
        active = aggregates.active_records(records)
        if not active:
            return "📭 No subscriptions yet. Add one with /add."

        upcoming = aggregates.upcoming_records(records, today, self.upcoming_window_days)
        overdue = aggregates.overdue_records(records, today)
        lines = [
            f"📊 Dashboard - {today.isoformat()}\n",
            f"💳 Monthly: {self._money(aggregates.total_monthly_spending(records))}",
            f"📅 Yearly: {self._money(aggregates.total_yearly_spending(records))}",
            f"✅ Active: {len(active)}",
            f"🔔 Renewing in {self.upcoming_window_days} days: "
            f"{aggregates.upcoming_renewals_count(records, today, self.upcoming_window_days)}",
            f"🔁 Auto-renewing: {len(aggregates.auto_renewing_records(records))}"
            f" | Manual: {len(aggregates.records_without_auto_renewal(records))}",
        ]
        if overdue:
            lines.append("\n🔴 Overdue:")
            lines.extend(self._row(r, today) for r in overdue)
        if upcoming:
            lines.append("\n🟡 Upcoming:")
            lines.extend(self._row(r, today) for r in upcoming)
        return "\n".join(lines)

    def upcoming(self) -> str:
        records = self.current_records()
        today = self.clock()
        upcoming = aggregates.upcoming_records(records, today, self.upcoming_window_days)
        if not upcoming:
            return f"😌 Nothing renews in the next {self.upcoming_window_days} days."
        lines = [f"🔔 Renewing in the next {self.upcoming_window_days} days:\n"]
        lines.extend(self._row(r, today) for r in upcoming)
        return "\n".join(lines)

    def overdue(self) -> str:
        records = self.current_records()
        today = self.clock()
        overdue = aggregates.overdue_records(records, today)
        if not overdue:
            return "✅ Nothing is overdue."
        lines = ["🔴 Overdue (renewal disabled):\n"]
        lines.extend(self._row(r, today) for r in overdue)
        return "\n".join(lines)

    def analytics(self, period: AnalyticsPeriod = AnalyticsPeriod.MONTH) -> str:
        records = self.current_records()
        if not aggregates.active_records(records):
            return "📭 No data available. Add some subscriptions to see analytics."

        if period is AnalyticsPeriod.YEAR:
            total = aggregates.total_yearly_spending(records)
        else:
            total = aggregates.total_monthly_spending(records)

        lines = [
            f"📈 Analytics ({period.value})\n",
            f"💰 Total: {self._money(total)}",
            f"✅ Active: {len(aggregates.active_records(records))}",
            "\nBy category:",
        ]
        for row in aggregates.category_breakdown(records, period):
            style = style_for(row.category)
            plural = "" if row.count == 1 else "s"
            lines.append(
                f"  {style.icon} {style.label}: {self._money(row.amount)} "
                f"({row.percentage:.1f}%) - {row.count} subscription{plural}"
            )

        expensive = aggregates.most_expensive(records)
        cheap = aggregates.cheapest(records)
        cycle = aggregates.most_common_billing_cycle(records)
        category = aggregates.most_common_category(records)
        lines.extend([
            "\nStatistics:",
            f"  Average monthly cost: {self._money(aggregates.average_monthly_cost(records))}",
            f"  Most expensive: {expensive.name if expensive else NO_DATA}",
            f"  Cheapest: {cheap.name if cheap else NO_DATA}",
            f"  Most common billing cycle: {cycle.value if cycle else NO_DATA}",
            f"  Most common category: {style_for(category).label if category else NO_DATA}",
        ])
        return "\n".join(lines)

    # ── FORMATTING ────────────────────────────────────────

    def _money(self, amount: Decimal) -> str:
        return f"{self.currency_symbol}{amount:.2f}"

    def _due_label(self, record: SubscriptionRecord, today: date) -> str:
        if is_overdue(record.next_billing_date, today):
            return "Overdue"
        days = days_until(record.next_billing_date, today)
        if days == 0:
            return "today"
        return f"{days} day{'' if days == 1 else 's'}"

    def _row(self, record: SubscriptionRecord, today: date) -> str:
        style = style_for(record.category)
        return (
            f"  {style.icon} [{short_id(record)}] {record.name}: "
            f"{self._money(record.price)} ({record.billing_cycle.value}) - "
            f"{record.next_billing_date.isoformat()} ({self._due_label(record, today)})"
        )

    def _detail(self, record: SubscriptionRecord, today: date) -> str:
        style = style_for(record.category)
        lines = [
            f"  📌 {record.name} [{short_id(record)}]",
            f"  💵 {self._money(record.price)} {record.billing_cycle.value}"
            f" (≈ {self._money(monthly_amount(record.price, record.billing_cycle))}/month)",
            f"  {style.icon} {style.label}",
            f"  📅 Next: {record.next_billing_date.isoformat()} ({self._due_label(record, today)})",
            f"  🔁 Renewal: {record.repetition_type.value}",
        ]
        if record.notes:
            lines.append(f"  📝 {record.notes}")
        return "\n".join(lines)
