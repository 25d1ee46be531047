"""
Schema verification tests for database table conventions.

Ensures all tables follow ORGanizer's conventions:
- org is the root tenant entity; tenant-scoped tables carry org_id
- org_id foreign keys cascade when an organization is deleted
- All timestamps are timezone-aware
- Alembic migrations form a single chain and create every model table
"""

import importlib.util
import re
from pathlib import Path

import pytest
from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from organizer.database import engine as db_engine
from organizer.models import Base

MIGRATIONS_DIR = Path(__file__).parent.parent.parent / "migrations" / "versions"

# Tables that are not scoped to a single organization
GLOBAL_TABLES = {"org", "app_user", "login_tokens", "user_settings", "organization_members"}


@pytest.fixture(scope="module")
def engine() -> Engine:
    """Create all tables on the test engine for introspection."""
    Base.metadata.create_all(bind=db_engine)
    yield db_engine
    Base.metadata.drop_all(bind=db_engine)


class TestTableConventions:
    """Verify all tables follow ORGanizer database conventions."""

    @pytest.fixture(scope="class")
    def inspector(self, engine: Engine):
        return inspect(engine)

    @pytest.fixture(scope="class")
    def all_tables(self, inspector):
        return inspector.get_table_names()

    def test_org_table_exists(self, all_tables):
        assert "org" in all_tables, "org table must exist as root tenant entity"

    def test_org_table_has_no_org_id(self, inspector):
        columns = {col["name"] for col in inspector.get_columns("org")}
        assert "org_id" not in columns, "org table must NOT have org_id (it's the root tenant entity)"

    def test_tenant_tables_have_org_id(self, inspector, all_tables):
        for table_name in all_tables:
            if table_name in GLOBAL_TABLES:
                continue
            columns = {col["name"]: col for col in inspector.get_columns(table_name)}
            assert "org_id" in columns, f"Table '{table_name}' missing 'org_id' column for multi-tenant isolation"
            assert not columns["org_id"]["nullable"], f"Table '{table_name}' org_id must be NOT NULL"

    def test_org_id_foreign_keys_cascade(self):
        for table in Base.metadata.sorted_tables:
            for fk in table.foreign_keys:
                if fk.column.table.name == "org" and fk.parent.name in ("org_id", "organization_id"):
                    assert fk.ondelete == "CASCADE", (
                        f"{table.name}.{fk.parent.name} must cascade on organization delete"
                    )

    def test_timestamps_are_timezone_aware(self):
        for table in Base.metadata.sorted_tables:
            for column in table.columns:
                if column.name.endswith("_at"):
                    assert getattr(column.type, "timezone", False), (
                        f"{table.name}.{column.name} must be timezone-aware"
                    )


class TestMigrationChain:
    """Verify the Alembic revision files."""

    @pytest.fixture(scope="class")
    def revisions(self):
        modules = []
        for path in sorted(MIGRATIONS_DIR.glob("*.py")):
            spec = importlib.util.spec_from_file_location(path.stem, path)
            module = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(module)
            modules.append((path, module))
        return modules

    def test_single_linear_chain(self, revisions):
        heads = [m for _, m in revisions if m.down_revision is None]
        assert len(heads) == 1, "exactly one base revision expected"

        previous = None
        for _, module in revisions:
            assert module.down_revision == previous
            previous = module.revision

    def test_every_model_table_is_migrated(self, revisions):
        created = set()
        for path, _ in revisions:
            created.update(re.findall(r"op\.create_table\(\s*'(\w+)'", path.read_text()))

        assert created == set(Base.metadata.tables)
