import importlib
import importlib.util
import os
import pkgutil
import unittest

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect

import app.models.orm as orm_package
from app.models.orm import Base

MIGRATION_PATH = os.path.join(
    os.path.dirname(os.path.abspath(__file__)),
    "..",
    "migrations",
    "versions",
    "20261019_create_taskflow_tables.py",
)


def _load_migration():
    spec = importlib.util.spec_from_file_location("create_taskflow_tables", MIGRATION_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestOrmPackage(unittest.TestCase):

    def test_every_model_module_imports(self):
        for module in pkgutil.iter_modules(orm_package.__path__):
            importlib.import_module(f"{orm_package.__name__}.{module.name}")

    def test_registered_tables(self):
        self.assertEqual(
            set(Base.metadata.tables),
            {"users", "categories", "tasks", "revoked_tokens"},
        )


class TestInitialMigration(unittest.TestCase):

    def setUp(self):
        self.engine = create_engine("sqlite://")
        migration = _load_migration()
        with self.engine.begin() as conn:
            with Operations.context(MigrationContext.configure(conn)):
                migration.upgrade()

    def tearDown(self):
        self.engine.dispose()

    def test_creates_all_tables(self):
        self.assertEqual(
            set(inspect(self.engine).get_table_names()),
            {"users", "categories", "tasks", "revoked_tokens"},
        )

    def test_user_email_has_single_unique_index(self):
        inspector = inspect(self.engine)
        email_indexes = [ix for ix in inspector.get_indexes("users") if ix["column_names"] == ["email"]]
        self.assertEqual(len(email_indexes), 1)
        self.assertTrue(email_indexes[0]["unique"])
        self.assertEqual(inspector.get_unique_constraints("users"), [])

    def test_matches_model_email_index(self):
        model_indexes = [ix for ix in Base.metadata.tables["users"].indexes if ix.name == "ix_users_email"]
        self.assertEqual(len(model_indexes), 1)
        self.assertTrue(model_indexes[0].unique)


if __name__ == "__main__":
    unittest.main()
