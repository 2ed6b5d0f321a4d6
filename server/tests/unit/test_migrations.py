"""The alembic revisions build the same schema the models declare."""

from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from arah_umroh.core.database import Base

DB_DIR = Path(__file__).resolve().parents[2] / "db"


def alembic_config(database_path: Path) -> Config:
    config = Config(str(DB_DIR / "alembic.ini"))
    config.set_main_option("script_location", str(DB_DIR / "alembic"))
    config.set_main_option("sqlalchemy.url", f"sqlite+aiosqlite:///{database_path}")
    return config


def test_upgrade_head_matches_models(tmp_path):
    database_path = tmp_path / "migrated.db"

    command.upgrade(alembic_config(database_path), "head")

    engine = create_engine(f"sqlite:///{database_path}")
    try:
        inspector = inspect(engine)
        tables = set(inspector.get_table_names()) - {"alembic_version"}
        assert tables == set(Base.metadata.tables)

        for name, table in Base.metadata.tables.items():
            columns = {column["name"] for column in inspector.get_columns(name)}
            assert columns == set(table.columns.keys()), name

        unique_sets = {
            tuple(constraint["column_names"])
            for constraint in inspector.get_unique_constraints("idempotency_records")
        }
        assert ("user_id", "idempotency_key", "method") in unique_sets
    finally:
        engine.dispose()


def test_downgrade_base_drops_everything(tmp_path):
    database_path = tmp_path / "migrated.db"
    config = alembic_config(database_path)

    command.upgrade(config, "head")
    command.downgrade(config, "base")

    engine = create_engine(f"sqlite:///{database_path}")
    try:
        assert set(inspect(engine).get_table_names()) == {"alembic_version"}
    finally:
        engine.dispose()
