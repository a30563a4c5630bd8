from datetime import date, timedelta
from decimal import Decimal

import pytest

from models.subscription import (
    BillingCycle,
    RepetitionType,
    SubscriptionCategory,
    SubscriptionValidationError,
)
from repositories.subscription_store import SubscriptionStore
from services.aggregates import AnalyticsPeriod
from services.subscription_service import (
    NO_DATA,
    SubscriptionService,
    parse_billing_cycle,
    parse_color,
    parse_date,
    parse_price,
    parse_repetition_type,
    short_id,
)
from tests.conftest import TODAY


@pytest.fixture
def store(storage):
    return SubscriptionStore(storage)


@pytest.fixture
def service(store):
    return SubscriptionService(store, clock=lambda: TODAY)


# ── PARSERS ───────────────────────────────────────────────

@pytest.mark.parametrize("text, expected", [
    ("15.99", Decimal("15.99")),
    ("$15.99", Decimal("15.99")),
    ("15,99", Decimal("15.99")),
    ("0", Decimal("0")),
])
def test_parse_price(text, expected):
    assert parse_price(text) == expected


@pytest.mark.parametrize("text", [
    "", "abc", "-3", "1.2.3", "1e5", "abc12", "2 for 15.99", "1,000.50", "NaN", "Infinity", "15.99 USD",
])
def test_parse_price_rejects_invalid(text):
    with pytest.raises(SubscriptionValidationError):
        parse_price(text)


def test_parse_choices():
    assert parse_billing_cycle(" Yearly ") is BillingCycle.YEARLY
    assert parse_repetition_type("off") is RepetitionType.DISABLED
    assert parse_repetition_type("quarterly") is RepetitionType.QUARTERLY
    assert parse_color("Red") == "red"
    assert parse_date("2026-12-01") == date(2026, 12, 1)


@pytest.mark.parametrize("parser, text", [
    (parse_billing_cycle, "daily"),
    (parse_repetition_type, "sometimes"),
    (parse_color, "beige"),
    (parse_date, "01/12/2026"),
])
def test_parsers_reject_unknown_values(parser, text):
    with pytest.raises(SubscriptionValidationError):
        parser(text)


# ── COMMANDS ──────────────────────────────────────────────

def test_add_manual_with_defaults(service, store):
    result = service.add_manual("Netflix", "15.99", "monthly")

    assert result["success"] is True
    assert result["message"].startswith("✅ Subscription added:")
    record = store.records[0]
    assert record.category is SubscriptionCategory.OTHER
    assert record.next_billing_date == TODAY
    assert record.repetition_type is RepetitionType.MONTHLY
    assert record.color == "blue"


def test_add_manual_past_date_is_advanced(service, store):
    service.add_manual("Gym", "30", "monthly", next_billing_date="2026-03-01")
    assert store.records[0].next_billing_date == date(2026, 4, 1)


def test_add_manual_rejects_bad_input(service, store):
    result = service.add_manual("Netflix", "-1", "monthly")

    assert result["success"] is False
    assert result["message"].startswith("⚠️")
    assert len(store) == 0
    assert service.add_manual("Netflix", "2 for 15.99", "monthly")["success"] is False
    assert len(store) == 0


def test_add_manual_rejects_blank_name(service, store):
    assert service.add_manual("  ", "5", "monthly")["success"] is False
    assert len(store) == 0


def test_edit_subscription(service, store):
    service.add_manual("Netflix", "15.99", "monthly")
    record_id = short_id(store.records[0])

    msg = service.edit_subscription(record_id, {"price": "17.99", "repeat": "disabled", "name": "Netflix 4K"})

    assert msg.startswith("✏️ Subscription updated:")
    record = store.records[0]
    assert record.price == Decimal("17.99")
    assert record.repetition_type is RepetitionType.DISABLED
    assert record.name == "Netflix 4K"


def test_edit_subscription_errors(service, store):
    service.add_manual("Netflix", "15.99", "monthly")
    record_id = short_id(store.records[0])

    assert "No subscription matches" in service.edit_subscription("zzzz", {"price": "1"})
    assert "Nothing to change" in service.edit_subscription(record_id, {})
    assert "Unknown field" in service.edit_subscription(record_id, {"colour": "red"})
    assert service.edit_subscription(record_id, {"price": "free"}).startswith("⚠️")
    assert store.records[0].price == Decimal("15.99")


def test_delete_and_toggle(service, store):
    service.add_manual("Netflix", "15.99", "monthly")
    record_id = short_id(store.records[0])

    assert service.toggle_subscription(record_id) == "Netflix paused ⏸️"
    assert service.toggle_subscription(record_id) == "Netflix resumed ▶️"
    assert service.delete_subscription(record_id) == "🗑️ Deleted Netflix."
    assert len(store) == 0
    assert "No subscription matches" in service.delete_subscription(record_id)
    assert "No subscription matches" in service.toggle_subscription(record_id)


def test_renew_now(store, make_record):
    store.add(make_record(next_billing_date=TODAY - timedelta(days=1)))
    service = SubscriptionService(store, clock=lambda: TODAY)

    assert service.renew_now().startswith("🔁 Advanced 1")
    assert service.renew_now() == "👌 All billing dates are current."
    assert store.records[0].next_billing_date == date(2026, 4, 9)


def test_reads_catch_up_when_the_clock_moves(store, make_record):
    clock = {"today": TODAY}
    service = SubscriptionService(store, clock=lambda: clock["today"])
    store.add(make_record(next_billing_date=TODAY))

    clock["today"] = TODAY + timedelta(days=1)
    service.dashboard()

    assert store.records[0].next_billing_date == date(2026, 4, 10)


# ── VIEWS ─────────────────────────────────────────────────

def test_list_subscriptions(service, store):
    service.add_manual("Spotify", "9.99", "monthly", category="music")
    service.add_manual("Netflix", "15.99", "monthly", category="streaming")
    service.add_manual("Gym", "30", "monthly", category="fitness")
    service.toggle_subscription(short_id(store.records[2]))

    msg = service.list_subscriptions()
    assert msg.index("Netflix") < msg.index("Spotify")
    assert "Gym" not in msg
    assert "1 paused" in msg

    assert "Spotify" in service.list_subscriptions(category="music")
    assert "Netflix" not in service.list_subscriptions(category="music")
    assert service.list_subscriptions("hulu") == "📭 No subscriptions found."
    assert service.list_subscriptions(category="bogus").startswith("⚠️")


def test_dashboard_empty(service):
    assert service.dashboard().startswith("📭 No subscriptions yet")


def test_dashboard_totals_and_sections(service):
    service.add_manual("Netflix", "15.99", "monthly", next_billing_date="2026-03-12")
    service.add_manual("Paper", "120", "yearly", next_billing_date="2026-03-01", repetition="disabled")

    msg = service.dashboard()

    assert "💳 Monthly: $25.99" in msg
    assert "📅 Yearly: $311.88" in msg
    assert "✅ Active: 2" in msg
    assert "🔴 Overdue:" in msg
    assert "🟡 Upcoming:" in msg
    assert "Auto-renewing: 1 | Manual: 1" in msg


def test_upcoming_and_overdue_views(service):
    assert service.upcoming().startswith("😌 Nothing renews")
    assert service.overdue() == "✅ Nothing is overdue."

    service.add_manual("Netflix", "15.99", "monthly", next_billing_date="2026-03-11")
    service.add_manual("Paper", "120", "yearly", next_billing_date="2026-03-01", repetition="off")

    upcoming = service.upcoming()
    assert "Netflix" in upcoming and "1 day)" in upcoming
    assert "Paper" not in upcoming
    overdue = service.overdue()
    assert "Paper" in overdue and "Overdue" in overdue


def test_analytics_empty(service):
    assert service.analytics().startswith("📭 No data available")


def test_analytics_report(service):
    service.add_manual("Netflix", "15.99", "monthly", category="streaming")
    service.add_manual("Spotify", "9.99", "monthly", category="music")
    service.add_manual("Adobe", "52.99", "monthly", category="productivity", repetition="yearly")

    monthly = service.analytics(AnalyticsPeriod.MONTH)
    assert "💰 Total: $78.97" in monthly
    assert "Most expensive: Adobe" in monthly
    assert "Cheapest: Spotify" in monthly
    assert "Most common billing cycle: monthly" in monthly
    assert "Most common category: Streaming" in monthly
    assert monthly.index("Productivity") < monthly.index("Streaming") < monthly.index("Music")

    yearly = service.analytics(AnalyticsPeriod.YEAR)
    assert "💰 Total: $947.64" in yearly
    assert NO_DATA not in yearly


def test_currency_symbol_is_configurable(store):
    service = SubscriptionService(store, clock=lambda: TODAY, currency_symbol="€")
    service.add_manual("Netflix", "15.99", "monthly")
    assert "💳 Monthly: €15.99" in service.dashboard()
