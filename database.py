import os
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

# --- CONFIG (env se aata hai) ---
SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./fee_payments.db")
SQL_ECHO = os.getenv("SQL_ECHO", "0").lower() in ("1", "true", "yes")

# Render/Heroku purana "postgres://" scheme dete hain
if SQLALCHEMY_DATABASE_URL.startswith("postgres://"):
    SQLALCHEMY_DATABASE_URL = SQLALCHEMY_DATABASE_URL.replace("postgres://", "postgresql://", 1)


def use_explicit_sqlite_begin(engine):
    """
    pysqlite apne hisaab se BEGIN bhejta hai (sirf DML se pehle), isliye DDL
    transaction ke bahar chala jata hai. Driver ka BEGIN band karke hum khud
    BEGIN emit karte hain, taaki poora batch ek hi scope mein rahe.
    """
    @event.listens_for(engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_engine(url: str = SQLALCHEMY_DATABASE_URL, echo: bool = SQL_ECHO):
    is_sqlite = url.startswith("sqlite")
    kwargs = {}
    if is_sqlite:
        kwargs["connect_args"] = {"check_same_thread": False}
        # In-memory DB: ek hi connection share karo warna har checkout naya khali DB deta hai
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool

    new_engine = create_engine(url, echo=echo, **kwargs)
    if is_sqlite:
        use_explicit_sqlite_begin(new_engine)
    return new_engine


engine = build_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
