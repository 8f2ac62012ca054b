"""Pytest configuration and fixtures for gomirror tests."""

import hashlib
import typing as t

import loguru
import pytest
import pytest_asyncio
from aiohttp import ClientSession
from blockbuster import BlockBuster, blockbuster_ctx
from typer.testing import CliRunner

from gomirror.cli.app import create_cli_app
from gomirror.config.settings import Environment, LogLevel, Settings
from gomirror.domain.catalog import Artifact, Release
from gomirror.events import BaseEmitter, EventEmitter
from gomirror.infrastructure.http import AiohttpClient
from gomirror.infrastructure.logging import reset_logging

DOWNLOAD_TEMPLATE = "https://dl.example.com/{filename}"
CATALOG_URL = "https://dl.example.com/?mode=json&include=all"


@pytest.fixture
def blockbuster() -> t.Iterator[BlockBuster]:
    """Detect blocking calls made by gomirror inside the event loop.

    Opt in per module with ``pytestmark = pytest.mark.usefixtures("blockbuster")``.
    """
    with blockbuster_ctx(scanned_modules=["gomirror"]) as bb:
        yield bb


@pytest.fixture(autouse=True)
def clean_logging_state():
    """Automatically reset logging before each test for isolation."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def test_settings(tmp_path):
    """Provide test-specific settings rooted in a temporary directory."""
    return Settings(
        environment=Environment.TESTING,
        log_level=LogLevel.CRITICAL,
        download_dir=tmp_path,
        catalog_url=CATALOG_URL,
        download_url_template=DOWNLOAD_TEMPLATE,
    )


@pytest.fixture
def mock_logger(mocker):
    """Provide a mock logger for testing that captures log calls."""
    return mocker.Mock(spec=loguru.logger)


@pytest.fixture
def mock_emitter(mocker):
    """Provide a mock event emitter for testing event emission."""
    emitter = mocker.Mock(spec=BaseEmitter)
    emitter.emit = mocker.AsyncMock()
    return emitter


@pytest.fixture
def real_emitter(mock_logger):
    """Provide a real EventEmitter for tests that subscribe handlers."""
    return EventEmitter(mock_logger)


@pytest_asyncio.fixture
async def http_client():
    """Provide an open AiohttpClient over a plain ClientSession."""
    session = ClientSession()
    async with AiohttpClient(session=session) as client:
        yield client
    await session.close()


@pytest.fixture
def sha256_hex():
    """Hex SHA-256 of some bytes."""

    def _calculate(content: bytes) -> str:
        return hashlib.sha256(content).hexdigest()

    return _calculate


@pytest.fixture
def make_artifact():
    """Factory fixture to create Artifact instances with sensible defaults."""

    def _make_artifact(
        filename: str = "go1.21.0.linux-amd64.tar.gz",
        *,
        content: bytes | None = None,
        **kwargs: t.Any,
    ) -> Artifact:
        if content is not None:
            kwargs.setdefault("size", len(content))
            kwargs.setdefault("sha256", hashlib.sha256(content).hexdigest())
        kwargs.setdefault("size", 1000)
        kwargs.setdefault("sha256", "ab" * 32)
        kwargs.setdefault("os", "linux")
        kwargs.setdefault("arch", "amd64")
        kwargs.setdefault("kind", "archive")
        return Artifact(filename=filename, **kwargs)

    return _make_artifact


@pytest.fixture
def make_release():
    """Factory fixture to create Release instances."""

    def _make_release(
        version: str = "go1.21.0", files: t.Sequence[Artifact] = (), stable: bool = True
    ) -> Release:
        return Release(version=version, stable=stable, files=tuple(files))

    return _make_release


# CLI-specific fixtures


@pytest.fixture
def cli_runner():
    """Provide Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def default_app():
    """Provide CLI app with default settings."""
    return create_cli_app()


@pytest.fixture
def test_app(test_settings):
    """Provide CLI app with test settings injected."""
    return create_cli_app(settings=test_settings)
