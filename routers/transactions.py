from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from database import get_db
from schemas.fee_payments import Batch, BatchReport, TableSnapshot, InvariantBreach
from services.transaction_runner import TransactionRunner
from services.acid_demo import run_demo
from services.invariants import check_invariants
from typing import List

router = APIRouter(prefix="/api/v1/transactions", tags=["Transactions"])


def get_runner(db: Session = Depends(get_db)) -> TransactionRunner:
    return TransactionRunner(db)


def _db_error(e: SQLAlchemyError):
    # Runner pehle hi rollback kar chuka hai
    return HTTPException(status_code=500, detail=f"Database error. Batch rolled back. Error: {str(e)}")


# --- API 1: EK BATCH CHALAO ---
@router.post("/batches", response_model=BatchReport)
def run_batch(batch: Batch, runner: TransactionRunner = Depends(get_runner)):
    try:
        return runner.run_report(batch)
    except SQLAlchemyError as e:
        raise _db_error(e)


# --- API 2: KAI BATCH, ORDER MEIN ---
@router.post("/batches/bulk", response_model=List[BatchReport])
def run_batches(batches: List[Batch], runner: TransactionRunner = Depends(get_runner)):
    try:
        return runner.run_all(batches)
    except SQLAlchemyError as e:
        raise _db_error(e)


# --- API 3: TABLE KA CURRENT STATE ---
@router.get("/snapshot", response_model=TableSnapshot)
def get_snapshot(runner: TransactionRunner = Depends(get_runner)):
    return runner.snapshot()


@router.get("/snapshot/text", response_class=PlainTextResponse)
def get_snapshot_text(runner: TransactionRunner = Depends(get_runner)):
    return runner.snapshot().render()


@router.get("/invariants", response_model=List[InvariantBreach])
def get_invariant_breaches(runner: TransactionRunner = Depends(get_runner)):
    """Empty list = table clean hai"""
    return check_invariants(runner.snapshot())


# --- API 4: CLEAR (tutorial ka initial step) ---
@router.delete("/payments", response_model=TableSnapshot)
def clear_payments(runner: TransactionRunner = Depends(get_runner)):
    return runner.clear()


# --- API 5: POORA ACID TUTORIAL ---
@router.post("/demo", response_model=List[BatchReport])
def run_acid_demo(runner: TransactionRunner = Depends(get_runner)):
    """
    Setup + Part A-D chalata hai aur har batch ki report deta hai.
    Dhyan do: table pehle khali ho jati hai.
    """
    try:
        return run_demo(runner)
    except SQLAlchemyError as e:
        raise _db_error(e)
