"""
ACID tutorial as batches.
Setup table banata aur khali karta hai, phir Part A-D ek ek guarantee dikhate hain.
"""
import datetime
from decimal import Decimal
from typing import List, Optional, Union

from models.fee_payments import FEE_PAYMENTS_DDL, CLEAR_FEE_PAYMENTS
from schemas.fee_payments import Batch, BatchReport, Statement
from services.transaction_runner import TransactionRunner

INSERT_PAYMENT_SQL = (
    "INSERT INTO FeePayments (payment_id, student_name, amount, payment_date) "
    "VALUES (:payment_id, :student_name, :amount, :payment_date)"
)


def payment_insert(
    payment_id: int,
    student_name: Optional[str],
    amount: Union[Decimal, float, str, None],
    payment_date: Union[datetime.date, str, None] = None,
) -> Statement:
    # Values jaise hain waise hi jaate hain; galat data ko DB hi rokega.
    # Amount Decimal hi rehta hai taaki DB number ki tarah compare kare (TEXT nahi)
    if amount is not None:
        amount = Decimal(str(amount))
        if amount.is_nan():
            raise ValueError(f"amount is not a number: {amount}")
    if isinstance(payment_date, datetime.date):
        payment_date = payment_date.isoformat()
    return Statement(sql=INSERT_PAYMENT_SQL, params={
        "payment_id": payment_id,
        "student_name": student_name,
        "amount": amount,
        "payment_date": payment_date,
    })


SETUP_LABEL = "Setup"
PART_A_LABEL = "Part A - Atomicity"
PART_B_LABEL = "Part B - Consistency"
PART_C_LABEL = "Part C - Isolation"
PART_D_LABEL = "Part D - Durability"
PART_D_REPLAY_LABEL = "Part D - Durability (replay)"


def demo_batches() -> List[Batch]:
    return [
        Batch(label=SETUP_LABEL, statements=[FEE_PAYMENTS_DDL, CLEAR_FEE_PAYMENTS]),

        # Teeno ek saath commit
        Batch(label=PART_A_LABEL, statements=[
            payment_insert(1, "Aarav Sharma", "1500.00", "2024-01-10"),
            payment_insert(2, "Diya Patel", "2000.00", "2024-01-11"),
            payment_insert(3, "Kabir Singh", "1750.50", "2024-01-12"),
        ]),

        # id 1 dobara aur negative amount -> poora batch rollback, id 4 bhi nahi bachega
        Batch(label=PART_B_LABEL, statements=[
            payment_insert(4, "Meera Iyer", "1200.00", "2024-01-13"),
            payment_insert(1, "Rohan Das", "-500.00", "2024-01-13"),
        ]),

        # NULL naam -> rollback, id 5 bhi gaya
        Batch(label=PART_C_LABEL, statements=[
            payment_insert(5, "Ishaan Verma", "1800.00", "2024-01-14"),
            payment_insert(6, None, "900.00", "2024-01-14"),
        ]),

        Batch(label=PART_D_LABEL, statements=[
            payment_insert(8, "Ananya Gupta", "2500.00", "2024-01-15"),
        ]),

        # committed id 8 dobara -> rollback, 8 waisa hi rehta hai
        Batch(label=PART_D_REPLAY_LABEL, statements=[
            payment_insert(9, "Vivaan Reddy", "1100.00", "2024-01-16"),
            payment_insert(8, "Ananya Gupta", "2500.00", "2024-01-15"),
        ]),
    ]


def run_demo(runner: TransactionRunner) -> List[BatchReport]:
    runner.ensure_schema()
    return runner.run_all(demo_batches())
