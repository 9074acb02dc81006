"""Tests for the Alembic migration chain."""

from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine, inspect, text

import posevault.models  # noqa: F401
from posevault.models.db import Base


def _make_alembic_config(db_url: str) -> Config:
    repo_root = Path(__file__).resolve().parents[1]
    config = Config(str(repo_root / "alembic.ini"))
    config.set_main_option("sqlalchemy.url", db_url)
    return config


def test_alembic_upgrade_and_downgrade(tmp_path) -> None:
    """Test alembic upgrade and downgrade."""
    db_url = f"sqlite:///{tmp_path / 'migrations.db'}"
    config = _make_alembic_config(db_url)
    script = ScriptDirectory.from_config(config)
    head_revision = script.get_current_head()
    assert head_revision is not None

    migration_engine = create_engine(db_url)
    try:
        with migration_engine.begin() as connection:
            config.attributes["connection"] = connection
            command.upgrade(config, "head")

            inspector = inspect(connection)
            assert inspector.has_table("alembic_version")
            version = connection.execute(text("SELECT version_num FROM alembic_version")).scalar_one()
            assert version == head_revision

            tables = set(inspector.get_table_names()) - {"alembic_version"}
            assert tables == set(Base.metadata.tables)

            share_columns = {c["name"] for c in inspector.get_columns("shared_galleries")}
            assert share_columns == set(Base.metadata.tables["shared_galleries"].columns.keys())

            command.downgrade(config, "base")

            inspector = inspect(connection)
            assert set(inspector.get_table_names()) - {"alembic_version"} == set()
            if inspector.has_table("alembic_version"):
                remaining = connection.execute(text("SELECT COUNT(*) FROM alembic_version")).scalar_one()
                assert remaining == 0
    finally:
        migration_engine.dispose()


def test_single_head() -> None:
    """Test the migration chain has a single head."""
    config = _make_alembic_config("sqlite://")
    assert len(ScriptDirectory.from_config(config).get_heads()) == 1
