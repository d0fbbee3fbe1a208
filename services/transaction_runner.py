"""
Transaction Runner - batch-at-a-time commit or rollback
Har batch ek transaction scope mein chalta hai: sab statements pass -> COMMIT,
koi bhi constraint toota -> ROLLBACK aur batch ka kuch bhi table mein nahi bachta.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy import Numeric, bindparam, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from models.fee_payments import FeePayment, FEE_PAYMENTS_DDL, CLEAR_FEE_PAYMENTS
from schemas.fee_payments import Batch, BatchReport, PaymentRow, Statement, TableSnapshot, ViolationOut
from services.constraints import ConstraintViolation, classify_integrity_error

logger = logging.getLogger(__name__)


@dataclass
class StatementResult:
    index: int
    rowcount: int = 0
    violation: Optional[ConstraintViolation] = None

    @property
    def ok(self) -> bool:
        return self.violation is None


def statement_clause(statement: Statement):
    """
    text() for the statement. Decimal params get a Numeric bind type so drivers
    without native Decimal (pysqlite) receive a number, not a string.
    """
    clause = text(statement.sql)
    numeric = [
        bindparam(name, type_=Numeric(10, 2))
        for name, value in (statement.params or {}).items()
        if isinstance(value, Decimal) and f":{name}" in statement.sql
    ]
    if numeric:
        clause = clause.bindparams(*numeric)
    return clause


def execute_statement(db: Session, statement: Statement, index: int) -> StatementResult:
    """
    Run one statement in the open transaction.
    Constraint errors come back as a failed result; any other database error is raised.
    """
    try:
        result = db.execute(statement_clause(statement), statement.params or {})
    except IntegrityError as e:
        violation = classify_integrity_error(e, statement_index=index, sql=statement.sql)
        if violation is None:
            raise
        return StatementResult(index=index, violation=violation)
    return StatementResult(index=index, rowcount=result.rowcount)


class TransactionRunner:
    def __init__(self, db: Session):
        self.db = db

    # =====================
    # TABLE HELPERS
    # =====================

    def ensure_schema(self):
        self.db.execute(text(FEE_PAYMENTS_DDL))
        self.db.commit()

    def snapshot(self) -> TableSnapshot:
        table = FeePayment.__table__
        rows = self.db.execute(select(table).order_by(table.c.payment_id)).mappings().all()
        # read transaction band karo, isme kuch likha nahi gaya
        self.db.rollback()
        return TableSnapshot(rows=[PaymentRow(**row) for row in rows])

    def clear(self) -> TableSnapshot:
        return self.run(Batch(label="Clear", statements=[CLEAR_FEE_PAYMENTS]))

    # =====================
    # BATCH EXECUTION
    # =====================

    def run(self, batch: Batch) -> TableSnapshot:
        return self.run_report(batch).after

    def run_report(self, batch: Batch) -> BatchReport:
        before = self.snapshot()
        results, violation = self._apply(batch)
        after = self.snapshot()

        violation_out = None
        if violation is not None:
            violation_out = ViolationOut(
                kind=violation.kind.value,
                statement_index=violation.statement_index,
                sql=violation.sql,
                message=violation.message,
            )

        return BatchReport(
            label=batch.label,
            committed=violation is None,
            statements_run=len(results),
            violation=violation_out,
            before=before,
            after=after,
        )

    def run_all(self, batches: Iterable[Batch]) -> List[BatchReport]:
        # ek batch fail ho to bhi agla chalega
        return [self.run_report(batch) for batch in batches]

    def _apply(self, batch: Batch):
        results = []
        try:
            for index, statement in enumerate(batch.statements):
                result = execute_statement(self.db, statement, index)
                results.append(result)
                if not result.ok:
                    break
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Batch %r failed with a database error, rolled back", batch.label)
            raise

        failed = results[-1].violation if results and not results[-1].ok else None
        if failed is not None:
            self.db.rollback()
            logger.warning(
                "Batch %r rolled back: %s violation at statement %d (%s)",
                batch.label, failed.kind.value, failed.statement_index, failed.message,
            )
            return results, failed

        try:
            self.db.commit()
        except IntegrityError as e:
            # deferred constraints commit par fail hote hain
            self.db.rollback()
            failed = classify_integrity_error(e)
            if failed is None:
                logger.exception("Batch %r failed at commit, rolled back", batch.label)
                raise
            logger.warning("Batch %r rolled back at commit: %s violation", batch.label, failed.kind.value)
            return results, failed

        logger.info("Batch %r committed (%d statements)", batch.label, len(results))
        return results, None
