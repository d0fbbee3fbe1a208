from collections import Counter
from typing import List

from schemas.fee_payments import InvariantBreach, TableSnapshot


def check_invariants(snapshot: TableSnapshot) -> List[InvariantBreach]:
    """Report rows that break the FeePayments rules. Empty list means the snapshot is clean."""
    breaches = []

    counts = Counter(snapshot.ids())
    for payment_id, count in sorted(counts.items()):
        if count > 1:
            breaches.append(InvariantBreach(
                rule="unique_payment_id",
                payment_id=payment_id,
                detail=f"payment_id {payment_id} appears {count} times",
            ))

    for row in snapshot.rows:
        # NULL amount schema allow karta hai (CHECK NULL par pass hota hai)
        if row.amount is not None and row.amount <= 0:
            breaches.append(InvariantBreach(
                rule="positive_amount",
                payment_id=row.payment_id,
                detail=f"amount {row.amount} is not greater than zero",
            ))
        if row.student_name is None or not row.student_name.strip():
            breaches.append(InvariantBreach(
                rule="student_name_present",
                payment_id=row.payment_id,
                detail="student_name is missing or empty",
            ))

    return breaches
