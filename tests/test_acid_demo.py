"""
Tests for the ACID tutorial batches and snapshot invariants
"""
from decimal import Decimal
from datetime import date

import pytest

import demo

from schemas.fee_payments import Batch, PaymentRow, TableSnapshot
from services.acid_demo import (
    INSERT_PAYMENT_SQL,
    PART_A_LABEL,
    PART_B_LABEL,
    PART_C_LABEL,
    PART_D_LABEL,
    PART_D_REPLAY_LABEL,
    SETUP_LABEL,
    demo_batches,
    payment_insert,
    run_demo,
)
from services.invariants import check_invariants
from services.transaction_runner import TransactionRunner


class TestDemo:
    def test_batch_order(self):
        labels = [b.label for b in demo_batches()]
        assert labels == [SETUP_LABEL, PART_A_LABEL, PART_B_LABEL, PART_C_LABEL, PART_D_LABEL, PART_D_REPLAY_LABEL]

    def test_run_demo_snapshots(self, runner):
        reports = run_demo(runner)

        assert [r.after.ids() for r in reports] == [
            [],
            [1, 2, 3],
            [1, 2, 3],
            [1, 2, 3],
            [1, 2, 3, 8],
            [1, 2, 3, 8],
        ]
        assert [r.committed for r in reports] == [True, True, False, False, True, False]

    def test_violation_kinds(self, runner):
        reports = {r.label: r for r in run_demo(runner)}

        assert reports[PART_B_LABEL].violation.kind in ("duplicate_key", "check")
        assert reports[PART_C_LABEL].violation.kind == "not_null"
        assert reports[PART_D_REPLAY_LABEL].violation.kind == "duplicate_key"
        assert reports[PART_D_REPLAY_LABEL].violation.statement_index == 1

    def test_failed_parts_leave_table_identical(self, runner):
        for report in run_demo(runner):
            if not report.committed:
                assert report.after.render() == report.before.render()

    def test_setup_clears_previous_rows(self, runner):
        run_demo(runner)
        reports = run_demo(runner)

        assert reports[0].before.ids() == [1, 2, 3, 8]
        assert reports[0].after.ids() == []
        assert reports[-1].after.ids() == [1, 2, 3, 8]

    def test_run_demo_creates_table_on_fresh_database(self, db):
        reports = run_demo(TransactionRunner(db))
        assert reports[-1].after.ids() == [1, 2, 3, 8]

    def test_final_state_passes_invariants(self, runner):
        run_demo(runner)
        assert check_invariants(runner.snapshot()) == []

    def test_committed_amounts_keep_two_decimals(self, runner):
        run_demo(runner)
        amounts = {row.payment_id: row.amount for row in runner.snapshot().rows}
        assert amounts[3] == Decimal("1750.50")


class TestPaymentInsert:
    def test_params(self):
        stmt = payment_insert(4, "Meera", Decimal("12.5"), date(2024, 1, 13))

        assert stmt.sql == INSERT_PAYMENT_SQL
        assert stmt.params == {
            "payment_id": 4,
            "student_name": "Meera",
            "amount": Decimal("12.5"),
            "payment_date": "2024-01-13",
        }

    def test_nulls_pass_through(self):
        stmt = payment_insert(6, None, None)
        assert stmt.params["student_name"] is None
        assert stmt.params["amount"] is None
        assert stmt.params["payment_date"] is None

    def test_float_amount(self):
        assert payment_insert(1, "A", 10.25).params["amount"] == Decimal("10.25")

    def test_amount_is_bound_as_decimal(self):
        assert isinstance(payment_insert(1, "A", "1500.00").params["amount"], Decimal)

    def test_nan_amount_rejected(self):
        with pytest.raises(ValueError):
            payment_insert(1, "A", "NaN")


class TestDemoScript:
    def test_log_level_defaults_to_info(self, db, monkeypatch, capsys):
        levels = []
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.setattr(demo.logging, "basicConfig", lambda **kw: levels.append(kw["level"]))
        monkeypatch.setattr(demo, "SessionLocal", lambda: db)

        demo.main()

        assert levels == ["INFO"]
        out = capsys.readouterr().out
        assert PART_D_REPLAY_LABEL in out
        assert "All invariants hold" in out

    def test_log_level_from_env(self, db, monkeypatch):
        levels = []
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setattr(demo.logging, "basicConfig", lambda **kw: levels.append(kw["level"]))
        monkeypatch.setattr(demo, "SessionLocal", lambda: db)

        demo.main()

        assert levels == ["DEBUG"]


class TestInvariants:
    def snapshot(self, *rows):
        return TableSnapshot(rows=[PaymentRow(**r) for r in rows])

    def test_clean(self):
        snap = self.snapshot(
            {"payment_id": 1, "student_name": "A", "amount": Decimal("1.00")},
            {"payment_id": 2, "student_name": "B", "amount": None},
        )
        assert check_invariants(snap) == []

    def test_duplicate_ids(self):
        snap = self.snapshot(
            {"payment_id": 1, "student_name": "A", "amount": Decimal("1")},
            {"payment_id": 1, "student_name": "B", "amount": Decimal("2")},
        )
        breaches = check_invariants(snap)
        assert [b.rule for b in breaches] == ["unique_payment_id"]
        assert breaches[0].payment_id == 1

    def test_non_positive_amount(self):
        snap = self.snapshot(
            {"payment_id": 1, "student_name": "A", "amount": Decimal("0")},
            {"payment_id": 2, "student_name": "B", "amount": Decimal("-3")},
        )
        assert [(b.rule, b.payment_id) for b in check_invariants(snap)] == [
            ("positive_amount", 1),
            ("positive_amount", 2),
        ]

    def test_missing_or_blank_name(self):
        snap = self.snapshot(
            {"payment_id": 1, "student_name": None, "amount": Decimal("1")},
            {"payment_id": 2, "student_name": "  ", "amount": Decimal("1")},
        )
        assert [b.rule for b in check_invariants(snap)] == ["student_name_present", "student_name_present"]

    def test_empty_name_row_is_stored_but_reported(self, runner):
        # schema sirf NULL rokta hai, khali string nahi
        snap = runner.run(Batch(label="blank", statements=[payment_insert(1, "", "5.00")]))

        assert snap.ids() == [1]
        assert [b.rule for b in check_invariants(snap)] == ["student_name_present"]
