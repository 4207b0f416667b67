from pathlib import Path

from flask_migrate import upgrade, downgrade
from sqlalchemy import inspect

from propdesk import create_app
from propdesk.config import TestingConfig
from propdesk.extensions import db

MIGRATIONS = str(Path(__file__).resolve().parent.parent / "migrations")

TABLES = {"zones", "buildings", "units", "tenants", "users", "documents"}


def test_migrations_build_and_drop_the_schema(tmp_path):
    class Config(TestingConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'propdesk.db'}"
        UPLOAD_ROOT = str(tmp_path / "storage")

    app = create_app(Config)
    with app.app_context():
        upgrade(directory=MIGRATIONS)

        inspector = inspect(db.engine)
        assert TABLES <= set(inspector.get_table_names())
        assert "uq_tenants_active_unit" in {i["name"] for i in inspector.get_indexes("tenants")}

        downgrade(directory=MIGRATIONS, revision="base")

        assert not TABLES & set(inspect(db.engine).get_table_names())
        db.engine.dispose()
