import logging
from logging.config import fileConfig

from alembic import context
from flask import current_app

config = context.config
fileConfig(config.config_file_name, disable_existing_loggers=False)
logger = logging.getLogger('alembic.env')

propdesk_db = current_app.extensions['migrate'].db
target_metadata = propdesk_db.metadata


def database_url():
    return propdesk_db.engine.url.render_as_string(hide_password=False).replace('%', '%%')


config.set_main_option('sqlalchemy.url', database_url())


def skip_empty_autogenerate(migration_context, revision, directives):
    """Don't write a revision file when autogenerate finds no model changes."""
    if getattr(config.cmd_opts, 'autogenerate', False):
        script = directives[0]
        if script.upgrade_ops.is_empty():
            directives[:] = []
            logger.info('No changes in schema detected.')


def configure_options(**kwargs):
    options = dict(
        target_metadata=target_metadata,
        compare_type=True,
        process_revision_directives=skip_empty_autogenerate,
    )
    options.update(kwargs)
    return options


def run_migrations_offline():
    context.configure(**configure_options(url=config.get_main_option('sqlalchemy.url'), literal_binds=True))
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    with propdesk_db.engine.connect() as connection:
        # SQLite cannot ALTER most constraints in place
        context.configure(**configure_options(
            connection=connection,
            render_as_batch=connection.dialect.name == 'sqlite',
        ))
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
