"""Dashboard aggregations and calendar notes."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from tests.conftest import assert_float_equal


@pytest.fixture
def populated(app, wallet_factory, transaction_factory):
    """Two funded wallets, one empty wallet and a month of activity (display in USD)."""

    assert app.set_display_currency("USD").ok
    main = wallet_factory(name="Main", currency="USD", initial_balance=1000)
    euro = wallet_factory(name="Euro", currency="EUR", initial_balance=100)
    wallet_factory(name="Spare", currency="USD")

    transaction_factory(main.id, 30, category="travel", occurred_at=datetime(2024, 4, 20, 9, 0))
    transaction_factory(main.id, 500, type="income", category="salary",
                        occurred_at=datetime(2024, 5, 2, 9, 0))
    transaction_factory(main.id, 100, category="groceries", occurred_at=datetime(2024, 5, 10, 18, 0))
    transaction_factory(euro.id, 40, category="rent", occurred_at=datetime(2024, 5, 12, 8, 0))
    result = app.create_transfer(
        from_wallet_id=main.id,
        to_wallet_id=euro.id,
        amount=80,
        occurred_at=datetime(2024, 5, 14, 12, 0),
    )
    assert result.ok, result.message
    return main, euro


class TestOverview:
    def test_current_month_excludes_transfers(self, app, populated):
        overview = app.overview("currentMonth")

        assert_float_equal(overview.total_balance, 1290 + 124 * 1.25)
        assert_float_equal(overview.income, 500)
        assert_float_equal(overview.expenses, 150)
        assert overview.transaction_count == 5

    def test_last_month(self, app, populated):
        overview = app.overview("lastMonth")

        assert overview.income == 0
        assert_float_equal(overview.expenses, 30)
        assert overview.transaction_count == 1

    def test_empty_ledger(self, app):
        overview = app.overview()

        assert overview.total_balance == 0
        assert overview.transaction_count == 0


class TestPeriodSummary:
    def test_daily_rows_carry_running_balance(self, app, populated):
        rows = app.period_summary("currentMonth")

        assert len(rows) == 31
        assert rows[0].date == date(2024, 5, 1)
        assert_float_equal(rows[0].balance, 1095)
        assert_float_equal(rows[1].income, 500)
        assert_float_equal(rows[1].balance, 1595)
        assert_float_equal(rows[11].expenses, 50)
        # The transfer day moves nothing in aggregate
        assert_float_equal(rows[13].balance, rows[12].balance)
        assert_float_equal(rows[-1].balance, app.overview().total_balance)

    def test_year_is_bucketed_by_month(self, app, populated):
        rows = app.period_summary("currentYear")

        assert [row.date for row in rows] == [date(2024, m, 1) for m in range(1, 13)]
        assert_float_equal(rows[0].balance, 1125)
        assert_float_equal(rows[3].expenses, 30)
        assert_float_equal(rows[3].balance, 1095)
        assert_float_equal(rows[4].income, 500)


class TestBreakdowns:
    def test_category_breakdown_sorted_largest_first(self, app, populated):
        assert app.category_expense_breakdown("currentMonth") == [
            ("groceries", 100.0),
            ("rent", 50.0),
        ]

    def test_wallet_distribution_skips_empty_wallets(self, app, populated):
        assert app.wallet_distribution() == [("Main", 1290.0), ("Euro", 155.0)]

    def test_distribution_in_default_display_currency(self, app, wallet_factory):
        wallet_factory(name="Dollars", currency="USD", initial_balance=10)

        assert app.wallet_distribution() == [("Dollars", 1000.0)]


class TestCalendarNotes:
    def test_note_lifecycle(self, app):
        created = app.add_calendar_note(
            note_date=date(2024, 5, 20), title="Rent", text="Pay landlord", note_type="reminder"
        )
        assert created.ok
        note_id = created.value.id
        assert created.value.is_completed is False

        updated = app.update_calendar_note(note_id, title="Rent due", note_date=date(2024, 5, 25))
        assert updated.ok
        assert updated.value.title == "Rent due"
        assert updated.value.text == "Pay landlord"

        toggled = app.toggle_calendar_note(note_id)
        assert toggled.value.is_completed is True
        assert app.toggle_calendar_note(note_id).value.is_completed is False

        assert app.delete_calendar_note(note_id).ok
        assert app.list_calendar_notes() == []

    def test_unknown_note_type_rejected(self, app):
        result = app.add_calendar_note(note_date=date(2024, 5, 20), note_type="birthday")

        assert result.rejected
        assert result.code == "invalid_input"
        assert app.list_calendar_notes() == []

    def test_missing_note(self, app):
        result = app.delete_calendar_note(999)

        assert result.rejected
        assert result.code == "note_not_found"

    def test_notes_between_is_inclusive(self, app):
        for day in (1, 15, 31):
            assert app.add_calendar_note(note_date=date(2024, 5, day), title=f"Day {day}").ok
        assert app.add_calendar_note(note_date=date(2024, 6, 1)).ok

        titles = [n.title for n in app.notes_between(date(2024, 5, 1), date(2024, 5, 31))]

        assert sorted(titles) == ["Day 1", "Day 15", "Day 31"]
