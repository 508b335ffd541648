from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from expense_api.config import settings
from expense_api.models.base import Base
# Import all model classes so their tables are registered on Base.metadata
from expense_api.models.user import User  # noqa: F401
from expense_api.models.group import Group  # noqa: F401
from expense_api.models.group_membership import GroupMembership  # noqa: F401
from expense_api.models.group_invitation import GroupInvitation  # noqa: F401
from expense_api.models.expense import Expense  # noqa: F401

config = context.config
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=True,  # SQLite needs batch mode for ALTERs
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
