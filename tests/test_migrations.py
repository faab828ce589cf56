"""Alembic migrations must produce the schema the models describe"""

import importlib.util
import io
import uuid
from pathlib import Path

import pytest
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.dialects import postgresql
from sqlmodel import SQLModel

from fellowship import models  # noqa: F401

VERSIONS_DIR = Path(__file__).parent.parent / "alembic" / "versions"
CONSTRAINT_PREFIXES = ("PRIMARY", "CONSTRAINT", "FOREIGN", "CHECK", "UNIQUE")


def _load_revisions():
    revisions = []
    for path in sorted(VERSIONS_DIR.glob("*.py")):
        spec = importlib.util.spec_from_file_location(path.stem, path)
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        revisions.append(module)
    return revisions


def _upgrade(context: MigrationContext):
    with Operations.context(context):
        for revision in _load_revisions():
            revision.upgrade()


@pytest.fixture(scope="module")
def postgres_ddl():
    """Offline upgrade rendered as PostgreSQL DDL"""
    buffer = io.StringIO()
    context = MigrationContext.configure(
        dialect_name="postgresql", opts={"as_sql": True, "output_buffer": buffer}
    )
    _upgrade(context)
    return buffer.getvalue()


def _column_lines(ddl: str, table: str):
    start = ddl.index(f"CREATE TABLE {table} (")
    block = ddl[start : ddl.index(";", start)]
    lines = {}
    for line in block.split("\n")[1:]:
        line = line.strip().rstrip(",").strip()
        if not line or line == ")" or line.startswith(CONSTRAINT_PREFIXES):
            continue
        lines[line.split(" ")[0]] = line
    return lines


class TestMigrationMatchesModels:
    @pytest.mark.parametrize("table_name", sorted(SQLModel.metadata.tables))
    def test_columns_match(self, postgres_ddl, table_name):
        table = SQLModel.metadata.tables[table_name]
        dialect = postgresql.dialect()
        lines = _column_lines(postgres_ddl, table_name)

        assert set(lines) == {column.name for column in table.columns}
        for column in table.columns:
            line = lines[column.name]
            type_sql = column.type.compile(dialect=dialect)
            assert line == f"{column.name} {type_sql}" or line.startswith(
                f"{column.name} {type_sql} "
            ), line
            assert ("NOT NULL" in line) == (not column.nullable), line
            assert ("DEFAULT" in line) == (column.server_default is not None), line

    def test_timestamps_are_timezone_aware(self, postgres_ddl):
        for table_name in ("members", "registration_forms"):
            lines = _column_lines(postgres_ddl, table_name)
            assert lines["created_at"].startswith(
                "created_at TIMESTAMP WITH TIME ZONE"
            )
            assert lines["updated_at"].startswith(
                "updated_at TIMESTAMP WITH TIME ZONE"
            )

    def test_sqlite_upgrade_applies_defaults(self):
        engine = create_engine("sqlite://")
        with engine.begin() as connection:
            _upgrade(MigrationContext.configure(connection))

            assert set(inspect(connection).get_table_names()) >= {
                "members",
                "registration_forms",
                "form_submissions",
            }
            connection.execute(
                text(
                    "INSERT INTO members (id, name, email, phone, department) "
                    "VALUES (:id, 'Grace', 'grace@example.com', '+2547', 'Physics')"
                ),
                {"id": uuid.uuid4().hex},
            )
            row = connection.execute(
                text("SELECT notes, status FROM members")
            ).one()

        assert row.notes == ""
        assert row.status == "Active"
        engine.dispose()
