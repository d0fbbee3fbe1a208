from sqlalchemy import Column, Integer, Text, Numeric, Date
from database import Base

# Exact schema jo tutorial script banata hai. Isko badalna mat.
FEE_PAYMENTS_DDL = (
    "CREATE TABLE IF NOT EXISTS FeePayments ("
    "payment_id INTEGER PRIMARY KEY, "
    "student_name TEXT NOT NULL, "
    "amount DECIMAL(10,2) CHECK (amount > 0), "
    "payment_date DATE)"
)

CLEAR_FEE_PAYMENTS = "DELETE FROM FeePayments"


# FEE PAYMENT - read-only mapping, sirf typed snapshot ke liye.
# Table upar wala DDL banata hai, isliye constraints yahan declare nahi hote.
class FeePayment(Base):
    # Unquoted FeePayments: MySQL exact match, Postgres lowercase fold, SQLite case-insensitive
    __tablename__ = "FeePayments"
    __table_args__ = {"quote": False}

    payment_id = Column(Integer, primary_key=True, autoincrement=False)
    student_name = Column(Text, nullable=False)
    amount = Column(Numeric(10, 2))
    payment_date = Column(Date, nullable=True)
