"""
Configuration de la connexion à la base de données.
SQLAlchemy synchrone : PostgreSQL en production, SQLite en développement et en test.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker

from app.config import settings


def make_engine(url: str) -> Engine:
    """
    Crée un moteur SQLAlchemy.

    Sur SQLite, chaque transaction démarre par BEGIN IMMEDIATE : les écritures
    sont sérialisées dès le début de la transaction, ce qui joue le rôle du
    SELECT ... FOR UPDATE de PostgreSQL (ignoré par SQLite).
    """
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)

    engine = create_engine(
        url,
        connect_args={
            "check_same_thread": False,
            "timeout": settings.SQLITE_BUSY_TIMEOUT_SECONDS,
        },
    )

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        # pysqlite n'émet plus son propre BEGIN ; c'est l'événement "begin" qui s'en charge
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


engine = make_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dépendance FastAPI : fournit une session BDD et la ferme après usage."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
