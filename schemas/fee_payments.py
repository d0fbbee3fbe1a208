from pydantic import BaseModel, field_validator
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

# 1. Ek SQL statement (":name" placeholders ke saath)
class Statement(BaseModel):
    sql: str
    params: Dict[str, Any] = {}


# 2. Batch - saare statements ek saath commit ya ek saath rollback
class Batch(BaseModel):
    label: str
    statements: List[Statement] = []

    @field_validator("statements", mode="before")
    @classmethod
    def accept_plain_sql(cls, value):
        # "INSERT ..." jaisi plain string bhi chalegi
        if isinstance(value, list):
            return [{"sql": item} if isinstance(item, str) else item for item in value]
        return value


# 3. FeePayments ki ek row (snapshot ke liye)
class PaymentRow(BaseModel):
    payment_id: int
    student_name: Optional[str] = None
    amount: Optional[Decimal] = None
    payment_date: Optional[date] = None

    class Config:
        from_attributes = True


SNAPSHOT_COLUMNS = ["payment_id", "student_name", "amount", "payment_date"]


def _cell(value) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, Decimal):
        return f"{value:.2f}"
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


class TableSnapshot(BaseModel):
    rows: List[PaymentRow] = []

    def ids(self) -> List[int]:
        return [row.payment_id for row in self.rows]

    def render(self) -> str:
        """Fixed-width text table. Same rows always give the same bytes."""
        lines = [SNAPSHOT_COLUMNS]
        for row in self.rows:
            lines.append([_cell(getattr(row, col)) for col in SNAPSHOT_COLUMNS])

        widths = [max(len(line[i]) for line in lines) for i in range(len(SNAPSHOT_COLUMNS))]
        out = []
        for n, line in enumerate(lines):
            out.append(" | ".join(cell.ljust(widths[i]) for i, cell in enumerate(line)).rstrip())
            if n == 0:
                out.append("-+-".join("-" * w for w in widths))
        out.append(f"({len(self.rows)} rows)")
        return "\n".join(out) + "\n"


# 4. Kaunsa constraint toota (API response)
class ViolationOut(BaseModel):
    kind: str
    statement_index: Optional[int] = None
    sql: Optional[str] = None
    message: str


class BatchReport(BaseModel):
    label: str
    committed: bool
    statements_run: int
    violation: Optional[ViolationOut] = None
    before: TableSnapshot
    after: TableSnapshot


class InvariantBreach(BaseModel):
    rule: str  # unique_payment_id, positive_amount, student_name_present
    payment_id: int
    detail: str
