"""
ACID tutorial ko terminal mein chalao:

    DATABASE_URL=sqlite:///./fee_payments.db python demo.py

Har batch ke baad FeePayments table print hoti hai.
"""
import os
import logging
from database import SessionLocal
from services.transaction_runner import TransactionRunner
from services.acid_demo import run_demo
from services.invariants import check_invariants


def print_report(report):
    status = "✅ COMMIT" if report.committed else "↩️  ROLLBACK"
    print(f"\n=== {report.label} ===")
    print(f"{status} ({report.statements_run} statements run)")
    if report.violation:
        print(f"   {report.violation.kind} at statement {report.violation.statement_index}: {report.violation.message}")
        if report.after.render() == report.before.render():
            print("   Table unchanged (batch ka kuch bhi nahi bacha)")
    print(report.after.render(), end="")


def main():
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())

    db = SessionLocal()
    try:
        runner = TransactionRunner(db)
        reports = run_demo(runner)
        for report in reports:
            print_report(report)

        breaches = check_invariants(runner.snapshot())
        if breaches:
            print("\n⚠️ Invariant breaches:")
            for b in breaches:
                print(f"   {b.rule}: {b.detail}")
        else:
            print("\n🎉 All invariants hold (unique id, amount > 0, name present)")
    finally:
        db.close()


if __name__ == "__main__":
    main()
