"""
Integration tests for the Alembic migrations.

The migrated schema is compared with the one ``create_all`` builds from the
models, which is what the rest of the suite runs against.
"""

from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Engine

from calendarium.core.config import Settings
from calendarium.models import Base

ALEMBIC_DIR = Path(__file__).resolve().parents[2] / "alembic"


def describe(engine: Engine) -> dict[str, dict]:
    """Tables with their columns, indexes and foreign keys, by name."""
    inspector = inspect(engine)
    schema = {}
    for table in inspector.get_table_names():
        if table == "alembic_version":
            continue
        schema[table] = {
            "columns": {
                (c["name"], c["nullable"]) for c in inspector.get_columns(table)
            },
            "indexes": {
                (ix["name"], bool(ix["unique"])) for ix in inspector.get_indexes(table)
            },
            "foreign_keys": {
                (tuple(fk["constrained_columns"]), fk["referred_table"])
                for fk in inspector.get_foreign_keys(table)
            },
        }
    return schema


@pytest.fixture
def alembic_config(tmp_path: Path) -> Config:
    config = Config()
    config.set_main_option("script_location", str(ALEMBIC_DIR))
    config.set_main_option("sqlalchemy.url", f"sqlite+aiosqlite:///{tmp_path / 'migrated.db'}")
    return config


@pytest.fixture
def migrated(tmp_path: Path, alembic_config: Config):
    command.upgrade(alembic_config, "head")
    engine = create_engine(f"sqlite:///{tmp_path / 'migrated.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def from_models(tmp_path: Path):
    engine = create_engine(f"sqlite:///{tmp_path / 'models.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


class TestInitialMigration:
    def test_creates_every_model_table(self, migrated):
        assert set(describe(migrated)) == set(Base.metadata.tables)

    def test_matches_models(self, migrated, from_models):
        assert describe(migrated) == describe(from_models)

    def test_live_unique_indexes(self, migrated):
        indexes = {
            ix["name"]: ix for ix in inspect(migrated).get_indexes("user_calendar")
        }

        assert indexes["uq_user_calendar_pair_live"]["unique"]
        assert indexes["uq_user_calendar_pair_live"]["column_names"] == [
            "user_id",
            "calendar_id",
        ]

    def test_downgrade_drops_everything(self, migrated, alembic_config):
        command.downgrade(alembic_config, "base")

        assert describe(migrated) == {}


class TestSchemaSetting:
    def test_create_schema_is_off_by_default(self):
        assert Settings.model_fields["db_create_schema"].default is False
