from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from acadpilot.core import config


def _connect_args(database_url: str) -> dict:
    # FastAPI runs sync routes in a threadpool.
    if database_url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(config.DATABASE_URL, connect_args=_connect_args(config.DATABASE_URL))

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_account_schema_checked = False


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_account_schema(bind=None) -> None:
    """Bring tables created by earlier releases up to the current columns and indexes."""
    global _account_schema_checked

    if _account_schema_checked:
        return

    bind = bind or engine

    with _schema_lock:
        if _account_schema_checked:
            return

        inspector = inspect(bind)
        table_names = set(inspector.get_table_names())

        migration_steps = []
        if 'users' in table_names:
            existing_columns = {column['name'] for column in inspector.get_columns('users')}
            migration_steps += [
                statement for column_name, statement in [
                    ('institution', "ALTER TABLE users ADD COLUMN institution VARCHAR DEFAULT ''"),
                    ('created_at', 'ALTER TABLE users ADD COLUMN created_at TIMESTAMP'),
                ]
                if column_name not in existing_columns
            ]
        if 'verification_codes' in table_names:
            existing_columns = {column['name'] for column in inspector.get_columns('verification_codes')}
            if 'verified_until' not in existing_columns:
                migration_steps.append('ALTER TABLE verification_codes ADD COLUMN verified_until TIMESTAMP')

        with bind.begin() as connection:
            for statement in migration_steps:
                connection.execute(text(statement))
            if 'sessions' in table_names:
                connection.execute(
                    text('CREATE INDEX IF NOT EXISTS idx_sessions_user_expires ON sessions(user_id, expires_at)')
                )

        _account_schema_checked = True
