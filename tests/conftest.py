"""Shared pytest fixtures for segseq tests."""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner
from sqlalchemy import MetaData
from sqlalchemy.engine import Engine

from segseq.config.discovery import CONFIG_ENV_VAR
from segseq.infrastructure.database.engine import create_db_engine
from segseq.infrastructure.database.memory import InMemorySegmentStore
from segseq.services.generator import TableGenerator


@pytest.fixture(autouse=True)
def _no_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's SEGSEQ_CONFIG from leaking into tests."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'segseq.db'}"


@pytest.fixture
def db_engine(db_url: str) -> Generator[Engine]:
    """SQLite file engine configured the way the CLI configures it."""
    engine = create_db_engine(db_url)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def metadata() -> MetaData:
    return MetaData()


@pytest.fixture
def memory_store() -> InMemorySegmentStore:
    return InMemorySegmentStore()


@pytest.fixture
def make_generator(metadata: MetaData) -> Callable[..., TableGenerator]:
    """Factory for long generators whose schema is exposed on ``metadata``."""

    def _make(**options: Any) -> TableGenerator:
        generator = TableGenerator.configure("long", options)
        generator.expose_schema_requirements(metadata)
        return generator

    return _make


@pytest.fixture
def project_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Temp working directory holding a segseq.toml with two generators.

    Use via ``@pytest.mark.usefixtures("project_dir")`` on command test
    classes so the CLI discovers the config by walking up from CWD.
    """
    db_path = tmp_path / "cli.db"
    (tmp_path / "segseq.toml").write_text(
        f"""\
[database]
url = "sqlite:///{db_path.as_posix()}"
busy_timeout = 5

[defaults]
table_name = "id_segments"

[generators.orders]
segment_value = "orders"

[generators.invoices]
segment_value = "invoices"
increment_size = 10
initial_value = 1000
""",
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def _restore_logging() -> Generator[None]:
    """Undo the root handler the CLI installs on every invocation."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    names = ("", "segseq", "sqlalchemy.engine")
    levels = {name: logging.getLogger(name).level for name in names}
    yield
    root.handlers = handlers
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)
