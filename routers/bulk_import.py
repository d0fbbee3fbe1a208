"""
Fee Payment Bulk Import Router
CSV ya Excel file ki saari payments ek hi batch mein jaati hain:
ek bhi row constraint todegi to file ki koi bhi row save nahi hogi.
"""

from fastapi import APIRouter, Depends, HTTPException, File, UploadFile
from sqlalchemy.exc import SQLAlchemyError
from schemas.fee_payments import Batch, BatchReport
from services.transaction_runner import TransactionRunner
from services.acid_demo import payment_insert
from routers.transactions import get_runner
from typing import List, Dict, Any, Optional
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
import io

import pandas as pd

router = APIRouter(prefix="/api/v1/transactions", tags=["Bulk Import"])

REQUIRED_COLUMNS = ["payment_id", "student_name", "amount"]
OPTIONAL_COLUMNS = ["payment_date"]

# ==========================================
#   VALUE HELPERS (cell -> python value)
# ==========================================

def cell_text(value) -> Optional[str]:
    """Blank / NaN cell -> None (DB mein NULL jayega)"""
    if value is None or pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def parse_payment_id(value) -> Optional[int]:
    """Sirf poora number chalega: "7" ya "7.0" ok, "1.9" ya "abc" nahi"""
    text = cell_text(value)
    if text is None:
        return None
    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    if not number.is_finite() or number != number.to_integral_value():
        return None
    return int(number)


def parse_amount(value) -> Optional[Decimal]:
    """Finite decimal only; Infinity / NaN row error ban jaate hain"""
    text = cell_text(value)
    if text is None:
        return None
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return amount


PAYMENT_DATE_FORMATS = ["%Y-%m-%d", "%d-%m-%Y", "%d/%m/%Y", "%Y-%m-%d %H:%M:%S"]


def parse_payment_date(value) -> Optional[date]:
    # Excel date cells dtype=str ke saath "2024-01-10 00:00:00" ban kar aate hain
    text = cell_text(value)
    if text is None:
        return None
    for fmt in PAYMENT_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def read_payment_file(filename: str, contents: bytes) -> pd.DataFrame:
    # Sab kuch string padho, amount ka precision float mein na toote
    if filename.endswith(".csv"):
        df = pd.read_csv(io.BytesIO(contents), dtype=str)
    else:
        df = pd.read_excel(io.BytesIO(contents), engine="openpyxl", dtype=str)
    df.columns = df.columns.str.strip().str.lower()
    return df


def build_import_batch(label: str, df: pd.DataFrame):
    """
    DataFrame -> Batch. Returns (batch, errors).
    Sirf parsing check hoti hai; amount > 0, NULL naam, duplicate id DB khud pakdega.
    """
    errors: List[Dict[str, Any]] = []
    statements = []

    for idx, row in df.iterrows():
        row_num = idx + 2  # header ke baad

        if row.isna().all():
            continue

        payment_id = parse_payment_id(row.get("payment_id"))
        if payment_id is None:
            errors.append({"row": row_num, "error": f"Invalid payment_id '{row.get('payment_id')}'"})
            continue

        amount = None
        if not pd.isna(row.get("amount")):
            amount = parse_amount(row.get("amount"))
            if amount is None:
                errors.append({"row": row_num, "error": f"Invalid amount '{row.get('amount')}'"})
                continue

        payment_date = None
        raw_date = row.get("payment_date") if "payment_date" in df.columns else None
        if raw_date is not None and not pd.isna(raw_date):
            payment_date = parse_payment_date(raw_date)
            if payment_date is None:
                errors.append({"row": row_num, "error": f"Invalid payment_date '{raw_date}'"})
                continue

        statements.append(payment_insert(payment_id, cell_text(row.get("student_name")), amount, payment_date))

    return Batch(label=label, statements=statements), errors


# ==========================================
#   MAIN BULK IMPORT ENDPOINT
# ==========================================

@router.post("/import", response_model=BatchReport)
async def import_payments(
    file: UploadFile = File(...),
    runner: TransactionRunner = Depends(get_runner)
):
    """
    Bulk import fee payments from a CSV or Excel file as ONE batch.

    Expected columns: payment_id, student_name, amount, payment_date (optional)
    """
    if not file.filename.endswith((".csv", ".xlsx")):
        raise HTTPException(
            status_code=400,
            detail="Invalid file format. Please upload a .csv or .xlsx file"
        )

    try:
        contents = await file.read()
        df = read_payment_file(file.filename, contents)
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Error reading file: {str(e)}")

    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise HTTPException(status_code=400, detail=f"Missing columns: {', '.join(missing)}")

    batch, errors = build_import_batch(f"Import {file.filename}", df)
    if errors:
        # Parse error ho to kuch bhi DB tak nahi jayega
        raise HTTPException(status_code=400, detail={"message": "File has invalid rows. Nothing was imported.", "errors": errors})

    try:
        return runner.run_report(batch)
    except SQLAlchemyError as e:
        raise HTTPException(
            status_code=500,
            detail=f"Database error. No payments were imported. Error: {str(e)}"
        )


# ==========================================
#   SAMPLE TEMPLATE
# ==========================================

@router.get("/import/template")
async def get_import_template():
    """Expected columns for the upload file."""
    return {
        "required_columns": REQUIRED_COLUMNS,
        "optional_columns": OPTIONAL_COLUMNS,
        "notes": [
            "Saari rows ek transaction mein jaati hain: ek row fail = kuch bhi import nahi",
            "amount finite number hona chahiye; > 0 ka check database CHECK constraint karta hai",
            "student_name blank nahi ho sakta (NOT NULL)",
            "payment_date format: YYYY-MM-DD, DD-MM-YYYY or DD/MM/YYYY"
        ]
    }
