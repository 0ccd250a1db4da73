"""Alembic environment for the production ERP schema."""
import logging
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool
from alembic import context

import models  # noqa: F401  (โหลด models ให้ทุกตารางลง Base.metadata)
from config import DATABASE_URL
from database import Base

alembic_cfg = context.config

if alembic_cfg.config_file_name is not None:
    fileConfig(alembic_cfg.config_file_name)
logger = logging.getLogger("alembic.env")

target_metadata = Base.metadata


def database_url() -> str:
    """sqlalchemy.url ใน alembic.ini มาก่อน ถ้าว่างใช้ DATABASE_URL ของแอป"""
    url = alembic_cfg.get_main_option("sqlalchemy.url", "") or DATABASE_URL
    alembic_cfg.set_main_option("sqlalchemy.url", url)
    return url


def skip_empty_autogenerate(context_, revision, directives):
    # autogenerate ไม่เจออะไรเปลี่ยน -> ไม่ต้องสร้างไฟล์ revision ว่าง
    if getattr(alembic_cfg.cmd_opts, "autogenerate", False):
        script = directives[0]
        if script.upgrade_ops.is_empty():
            directives[:] = []
            logger.info("no schema changes detected")


def configure_kwargs(url: str) -> dict:
    # SQLite แก้ตารางด้วย ALTER ไม่ได้ -> batch mode
    return dict(
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=url.startswith("sqlite"),
        process_revision_directives=skip_empty_autogenerate,
    )


def run_migrations_offline() -> None:
    url = database_url()
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **configure_kwargs(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    url = database_url()
    connectable = engine_from_config(
        alembic_cfg.get_section(alembic_cfg.config_ini_section) or {},
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, **configure_kwargs(url))
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
