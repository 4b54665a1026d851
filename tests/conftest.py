"""
Shared test fixtures.
"""

import sys
from pathlib import Path

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

import pytest
from io import BytesIO
from unittest.mock import patch
from typing import Generator, Optional

from PIL import Image

from models.product_sheet import Language
from services.color_service import ColorService
from services.description_service import DescriptionService
from services.pipeline_service import PipelineSession
from services.sheet_store import SheetStore

# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """Mock Supabase query builder with chainable methods."""

    def __init__(self, client: "MockSupabaseClient", table: str):
        self._client = client
        self._table = table
        self._filters: list[tuple[str, object]] = []
        self._upsert: Optional[list[dict]] = None
        self._on_conflict = "id"
        self._range: Optional[tuple[int, int]] = None

    def select(self, *args, **kwargs):
        return self

    def upsert(self, data, on_conflict: str = "id"):
        self._upsert = [data] if isinstance(data, dict) else list(data)
        self._on_conflict = on_conflict
        return self

    def eq(self, column, value):
        self._filters.append((column, value))
        return self

    def order(self, column, **kwargs):
        return self

    def limit(self, count):
        return self

    def range(self, start: int, end: int):
        self._range = (start, end)
        self._client.range_calls.append((self._table, start, end))
        return self

    def execute(self) -> MockSupabaseResponse:
        if self._client.fail_operations:
            raise Exception("connection refused")

        rows = self._client.rows(self._table)

        if self._upsert is not None:
            key = self._on_conflict
            for item in self._upsert:
                existing = [r for r in rows if r.get(key) == item.get(key)]
                if existing:
                    existing[0].update(item)
                else:
                    rows.append(dict(item))
            self._client.upsert_calls.append((self._table, self._upsert))
            return MockSupabaseResponse(data=self._upsert)

        matched = [
            r for r in rows
            if all(r.get(column) == value for column, value in self._filters)
        ]
        if self._range is not None:
            start, end = self._range
            matched = matched[start:end + 1]
        return MockSupabaseResponse(data=[dict(r) for r in matched])


class MockSupabaseTable:
    """Mock Supabase table bound to the client's in-memory rows."""

    def __init__(self, client: "MockSupabaseClient", name: str):
        self._client = client
        self._name = name

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self._client, self._name)

    def upsert(self, data, on_conflict: str = "id"):
        return MockSupabaseQuery(self._client, self._name).upsert(data, on_conflict=on_conflict)


class MockSupabaseClient:
    """Mock Supabase client keeping rows between calls."""

    def __init__(self):
        self._tables: dict[str, list[dict]] = {}
        self.fail_operations = False
        self.upsert_calls: list[tuple[str, list[dict]]] = []
        self.range_calls: list[tuple[str, int, int]] = []

    def set_table_data(self, table_name: str, data: list):
        """Configure mock data for a table."""
        self._tables[table_name] = [dict(row) for row in data]

    def rows(self, table_name: str) -> list[dict]:
        return self._tables.setdefault(table_name, [])

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        return MockSupabaseTable(self, name)


# ===================
# STUB STRATEGIES
# ===================

class StubColorAnalyzer:
    """Vision stand-in returning a fixed color (or None)."""

    def __init__(self, color: Optional[str] = None, error: Optional[Exception] = None):
        self.color = color
        self.error = error
        self.calls: list[str] = []

    def dominant_color(self, image):
        self.calls.append(image.product_id)
        if self.error:
            raise self.error
        return self.color


class StubDescriptionGenerator:
    """Text generator stand-in returning fixed text (or None)."""

    def __init__(self, text: Optional[str] = None, error: Optional[Exception] = None):
        self.text = text
        self.error = error
        self.calls: list[tuple[str, Language, str]] = []

    def generate(self, record, language, dominant_color):
        self.calls.append((record.get("id"), language, dominant_color))
        if self.error:
            raise self.error
        return self.text


def make_image_bytes(
    color: tuple[int, int, int] = (200, 30, 30),
    size: tuple[int, int] = (40, 40),
    fmt: str = "PNG",
) -> bytes:
    """Encoded solid-color image."""
    output = BytesIO()
    Image.new("RGB", size, color).save(output, format=fmt)
    return output.getvalue()


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("product_sheets", [
                {"id": "JK100", "data": {...}}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Usage:
        def test_something(mock_db, mock_supabase):
            # Any code using get_supabase_client() gets the mock
    """
    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.sheet_store.get_supabase_client", return_value=mock_supabase):
            yield mock_supabase


@pytest.fixture
def session() -> PipelineSession:
    """Fresh pipeline session in English."""
    return PipelineSession(language=Language.EN)


@pytest.fixture
def sheet_store(mock_db) -> SheetStore:
    return SheetStore()


@pytest.fixture
def color_service() -> ColorService:
    """Local-only color derivation (no external analyzer)."""
    return ColorService(analyzer=None)


@pytest.fixture
def description_service() -> DescriptionService:
    """Template-only descriptions (no external generator)."""
    return DescriptionService(generator=None)


@pytest.fixture
def label_text() -> str:
    """Label for JK100 with every caption present."""
    return (
        "JAKAMEN\n"
        "Model: JK100\n"
        "Renk/Color: Blue\n"
        "Beden/Size: M\n"
        "Drop: 6\n"
        "Kalip: Slim Fit\n"
        "Material Composition: 100% Cotton\n"
        "Care Instructions: Wash at 30C, do not tumble dry\n"
        "Barcode: 8680000000017\n"
    )


@pytest.fixture
def database_csv() -> bytes:
    """Three products; JK100 and JK200 have labels in label_files."""
    return (
        "id,name,description,color,price\n"
        "JK100,Shirt,Oxford shirt,Navy,49.90\n"
        "JK200,Trousers,Chino trousers,Beige,59.90\n"
        "JK300,Jacket,Denim jacket,Indigo,89.90\n"
    ).encode("utf-8")


@pytest.fixture
def label_files() -> list[tuple[str, bytes]]:
    """Label files matching JK100 and JK200."""
    return [
        ("JK100.txt", b"Model: JK100\nRenk/Color: Blue\nBeden/Size: M\n"),
        ("JK200.txt", b"Model: JK200\nRenk/Color: Stone\nBeden/Size: 32/34\nDrop: 4\n"),
    ]


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client(mock_supabase, monkeypatch):
    """
    FastAPI test client with a fresh session, mocked store and no
    external services.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/api/session")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    import services.pipeline_service as pipeline_service
    import services.sheet_store as sheet_store
    import services.sheet_service as sheet_service
    from main import app

    monkeypatch.setattr(pipeline_service, "_pipeline_session", PipelineSession(language=Language.EN))
    monkeypatch.setattr(sheet_store, "_sheet_store", None)
    monkeypatch.setattr(sheet_service, "get_color_service", lambda: ColorService(analyzer=None))
    monkeypatch.setattr(
        sheet_service,
        "get_description_service",
        lambda: DescriptionService(generator=None),
    )

    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.sheet_store.get_supabase_client", return_value=mock_supabase):
            yield TestClient(app)
