import os
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from database import SessionLocal, engine
from services.transaction_runner import TransactionRunner

# --- IMPORT ROUTERS (APIs) ---
from routers import transactions
from routers import bulk_import

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("fee_payments")


# --- CREATE FeePayments TABLE (agar nahi hai) ---
def init_db():
    """
    Server start par exact DDL chalata hai. CREATE TABLE IF NOT EXISTS hai,
    isliye har restart par safe hai.
    """
    db = SessionLocal()
    try:
        TransactionRunner(db).ensure_schema()
        logger.info("FeePayments table ready on %s", engine.url.render_as_string(hide_password=True))
    finally:
        db.close()

init_db()

app = FastAPI(title="Fee Payments ACID Demo")

# ==========================================
# CORS (local frontend)
# ==========================================
origins = [
    o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",") if o.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- REGISTER ROUTERS ---
app.include_router(transactions.router)
app.include_router(bulk_import.router)


@app.get("/")
def health():
    return {"status": "ok", "app": "Fee Payments ACID Demo"}
