"""
Pytest configuration and fixtures for pylayoutexport tests.

Provides reusable fixtures for storage, activity logs, configuration
generators, registries and controllers.
"""

import shutil
import tempfile
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from hypothesis import strategies as st

from pylayoutexport.activity import InMemoryActivityLog, SqliteActivityLog
from pylayoutexport.core import ExporterRegistry
from pylayoutexport.executor import ExportController
from pylayoutexport.models import ExportConfiguration, PollPolicy, UploadDestination
from pylayoutexport.storage import InMemoryStorage

OUTPUT_URL = "https://exports.example.com/out/{file_id}.pdf"
ERROR_LIST_URL = "https://exports.example.com/errors/{file_id}"
OUTPUT_LIST_URL = "https://exports.example.com/output/{file_id}"

MAP_CONTENT = {"id": 1, "title": "Root", "nodes": {"1": {"title": "Root"}}}


class StaticConfigurationGenerator:
    """Issues configurations with predictable URLs and the given file ids.

    Records every requested format; raises `error` when set.
    """

    def __init__(self, *file_ids: str):
        self.file_ids = list(file_ids) or ["F1"]
        self.requests: list[str] = []
        self.error: BaseException | None = None

    async def generate_export_configuration(self, format: str) -> ExportConfiguration:
        self.requests.append(format)
        if self.error is not None:
            raise self.error

        file_id = self.file_ids[min(len(self.requests), len(self.file_ids)) - 1]
        return make_configuration(file_id)


def make_configuration(file_id: str) -> ExportConfiguration:
    return ExportConfiguration(
        file_id=file_id,
        destination=UploadDestination(
            url="https://exports.example.com/",
            key=f"in/{file_id}.json",
        ),
        signed_output_url=OUTPUT_URL.format(file_id=file_id),
        signed_error_list_url=ERROR_LIST_URL.format(file_id=file_id),
        signed_output_list_url=OUTPUT_LIST_URL.format(file_id=file_id),
    )


@pytest.fixture
async def storage() -> AsyncGenerator[InMemoryStorage, None]:
    """In-memory storage that gives up polling after half a second."""
    storage = InMemoryStorage(poll_timeout=500)
    yield storage
    await storage.reset()


@pytest.fixture
def activity_log() -> InMemoryActivityLog:
    return InMemoryActivityLog()


@pytest.fixture
async def sqlite_activity_log() -> AsyncGenerator[SqliteActivityLog, None]:
    """Async SQLite in-memory activity log with automatic cleanup."""
    activity_log = SqliteActivityLog(":memory:")
    await activity_log.connect()
    yield activity_log
    await activity_log.close()


@pytest.fixture
def temp_db_path():
    """Temporary database file path with automatic cleanup."""
    tmpdir = Path(tempfile.mkdtemp())
    db_path = tmpdir / "activity.db"
    yield db_path
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def generator() -> StaticConfigurationGenerator:
    return StaticConfigurationGenerator("F1")


@pytest.fixture
def registry() -> ExporterRegistry:
    """Registry with a pdf exporter producing MAP_CONTENT and an empty png exporter."""
    registry = ExporterRegistry()
    registry.register("pdf", lambda: dict(MAP_CONTENT))
    registry.register("png", lambda: {})
    return registry


@pytest.fixture
def controller(registry, generator, storage, activity_log) -> ExportController:
    """Controller with fast polling and in-memory collaborators."""
    return ExportController(registry, generator, storage, activity_log).with_poll_policy(
        PollPolicy.FAST
    )


# Hypothesis strategies for property-based testing

json_keys = st.text(
    min_size=1, max_size=12, alphabet=st.characters(whitelist_categories=("Lu", "Ll", "Nd"))
)
json_scalars = st.none() | st.booleans() | st.integers() | st.text(max_size=20)


@st.composite
def json_objects(draw, max_size: int = 8):
    """Strategy for flat JSON objects."""
    return draw(st.dictionaries(json_keys, json_scalars, max_size=max_size))


@st.composite
def key_adding_decorators(draw):
    """Strategy for decorators that add fixed keys derived from the result size."""
    keys = draw(st.lists(json_keys, min_size=1, max_size=4, unique=True))

    def decorator(result):
        return {key: f"{key}:{len(result)}" for key in keys}

    decorator.__name__ = "add_" + "_".join(keys)
    return decorator
