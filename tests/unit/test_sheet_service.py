"""
Unit tests for SheetService.

Run: pytest tests/unit/test_sheet_service.py -v
"""

import pytest

from services.sheet_service import SheetService, build_sheet
from services.pipeline_service import (
    with_database,
    with_labels,
    with_images,
    with_merged,
    with_sheets,
)
from services.merge_service import merge_records
from services.color_service import ColorService
from services.description_service import DescriptionService
from parsers.label_parser import extract_label
from exceptions import (
    MissingPrerequisiteError,
    SheetNotFoundError,
    ImmutableFieldError,
    DatabaseError,
)
from models.product_sheet import Language, NOT_AVAILABLE

from tests.conftest import StubColorAnalyzer, make_image_bytes
from tests.factories import ImageFactory


class FailingDescriptionService(DescriptionService):
    """Raises while rendering the given identifier."""

    def __init__(self, failing_id: str):
        super().__init__(generator=None)
        self.failing_id = failing_id

    def generate(self, record, language, dominant_color):
        if record.get("id") == self.failing_id:
            raise KeyError("template missing")
        return super().generate(record, language, dominant_color)


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mapped_session(session, label_text):
    """Session with three database rows, one label and one photo, merged."""
    rows = [
        {"id": "JK100", "name": "Shirt", "description": "Oxford shirt"},
        {"id": "JK200", "name": "Trousers", "description": "Chinos"},
        {"id": "JK300", "name": "Jacket", "description": "Denim"},
    ]
    labels = {"JK100": extract_label(label_text)}

    session.apply(with_database, rows)
    session.apply(with_labels, labels)
    state, _ = with_images(session.state, {
        "JK100": ImageFactory.create("JK100", data=make_image_bytes(color=(20, 40, 160))),
    })
    session.set(state)
    session.apply(with_merged, merge_records(rows, labels))
    return session


@pytest.fixture
def service(mapped_session, sheet_store, color_service, description_service):
    return SheetService(
        session=mapped_session,
        store=sheet_store,
        color_service=color_service,
        description_service=description_service,
    )


# ===================
# BUILD SHEET
# ===================

class TestBuildSheet:
    """Tests for build_sheet()"""

    def test_sheet_fields(self, color_service, description_service):
        record = {"id": "JK1", "name": "Shirt", "color": "Blue"}
        image = ImageFactory.create("JK1", data=make_image_bytes())

        sheet = build_sheet(record, image, Language.EN, color_service, description_service)

        assert sheet["id"] == "JK1"
        assert sheet["color"] == "Blue"
        assert sheet["imageUrl"] == "/api/images/JK1"
        assert "Dominant Color: rgb(" in sheet["description"]

    def test_sheet_without_image(self, color_service, description_service):
        """No photo: empty image URL and N/A color."""
        sheet = build_sheet({"id": "JK1"}, None, Language.EN, color_service, description_service)

        assert sheet["imageUrl"] == ""
        assert f"Dominant Color: {NOT_AVAILABLE}" in sheet["description"]

    def test_color_passed_to_description(self, description_service):
        color_service = ColorService(analyzer=StubColorAnalyzer(color="teal"))
        image = ImageFactory.create("JK1")

        sheet = build_sheet({"id": "JK1"}, image, Language.TR, color_service, description_service)

        assert "Ana Renk: teal" in sheet["description"]

    def test_record_not_modified(self, color_service, description_service):
        record = {"id": "JK1"}

        build_sheet(record, None, Language.EN, color_service, description_service)

        assert record == {"id": "JK1"}


# ===================
# GENERATE
# ===================

class TestGenerateAll:
    """Tests for SheetService.generate_all()"""

    def test_sheet_per_mapping(self, service, mock_supabase):
        """Every merged record gets a persisted sheet."""
        report = service.generate_all()

        assert report.generated == ["JK100", "JK200", "JK300"]
        assert report.success
        assert len(mock_supabase.rows("product_sheets")) == 3
        assert sorted(service.get_all()) == ["JK100", "JK200", "JK300"]

    def test_labeled_product_sheet(self, service):
        """The JK100 sheet combines database, label and photo."""
        report = service.generate_all()
        sheet = report.sheets["JK100"]

        assert sheet["name"] == "Shirt"
        assert sheet["color"] == "Blue"
        assert sheet["size"] == "M"
        assert sheet["imageUrl"] == "/api/images/JK100"
        assert sheet["description"].startswith("Shirt - Oxford shirt\nColor: Blue\nSize: M")

    def test_unlabeled_product_sheet(self, service):
        """Products without label or photo still get a sheet with N/A values."""
        sheet = service.generate_all().sheets["JK300"]

        assert sheet["imageUrl"] == ""
        assert "Color: N/A" in sheet["description"]
        assert "Dominant Color: N/A" in sheet["description"]

    def test_language_override(self, service):
        report = service.generate_all(language=Language.TR)

        assert report.language == Language.TR
        assert "Renk: Blue" in report.sheets["JK100"]["description"]

    def test_session_language_used(self, service, mapped_session):
        from services.pipeline_service import with_language
        mapped_session.apply(with_language, Language.TR)

        report = service.generate_all()

        assert report.language == Language.TR

    def test_requires_mapping(self, session, sheet_store, color_service, description_service):
        """Generating before mapping is refused."""
        service = SheetService(session, sheet_store, color_service, description_service)

        with pytest.raises(MissingPrerequisiteError) as exc_info:
            service.generate_all()

        assert exc_info.value.message == "Please map the data first."

    def test_persist_failure_is_not_fatal(self, service, mock_supabase):
        """A failed write is reported; every sheet is still built and kept."""
        mock_supabase.fail_operations = True

        report = service.generate_all()

        assert len(report.sheets) == 3
        assert [e.product_id for e in report.errors] == ["JK100", "JK200", "JK300"]
        assert report.errors[0].code == "SHEET_PERSIST_FAILED"
        assert not report.success
        assert len(service.get_all()) == 3

    def test_analyzer_failure_does_not_abort_batch(self, mapped_session, sheet_store, description_service):
        """An analyzer raising an unexpected error still yields every sheet."""
        analyzer = StubColorAnalyzer(error=RuntimeError("analyzer down"))
        service = SheetService(
            session=mapped_session,
            store=sheet_store,
            color_service=ColorService(analyzer=analyzer),
            description_service=description_service,
        )

        report = service.generate_all()

        assert report.generated == ["JK100", "JK200", "JK300"]
        assert report.success
        assert analyzer.calls == ["JK100"]
        assert "Dominant Color: rgb(" in report.sheets["JK100"]["description"]

    def test_build_failure_reported(self, mapped_session, sheet_store, color_service, mock_supabase):
        """A sheet that cannot be built is listed; the others are built and saved."""
        service = SheetService(
            session=mapped_session,
            store=sheet_store,
            color_service=color_service,
            description_service=FailingDescriptionService("JK200"),
        )

        report = service.generate_all()

        assert report.generated == ["JK100", "JK300"]
        assert [(e.product_id, e.code) for e in report.errors] == [("JK200", "SHEET_BUILD_FAILED")]
        assert "template missing" in report.errors[0].message
        assert set(service.get_all()) == {"JK100", "JK300"}
        assert {row["id"] for row in mock_supabase.rows("product_sheets")} == {"JK100", "JK300"}

    def test_replaces_previous_sheets(self, service, mapped_session):
        mapped_session.apply(with_sheets, {"JK999": {"id": "JK999"}})

        service.generate_all()

        assert "JK999" not in service.get_all()


# ===================
# REGENERATE
# ===================

class TestRegenerate:
    """Tests for SheetService.regenerate()"""

    def test_idempotent(self, service):
        """Regenerating without changes gives the same sheet."""
        first = service.generate_all().sheets["JK100"]

        sheet, failure = service.regenerate("JK100")

        assert sheet == first
        assert failure is None

    def test_keeps_edits(self, service):
        """Edited fields flow into the new description."""
        service.generate_all()
        service.update_sheet("JK100", {"color": "Crimson"})

        sheet, _ = service.regenerate("JK100")

        assert sheet["color"] == "Crimson"
        assert "Color: Crimson" in sheet["description"]
        assert sheet["description"].startswith("Shirt - Oxford shirt")

    def test_language_switch(self, service):
        service.generate_all()

        sheet, _ = service.regenerate("JK100", language=Language.TR)

        assert "Beden: M" in sheet["description"]

    def test_without_generated_sheet(self, service):
        """A mapped identifier can be regenerated before generate_all."""
        sheet, _ = service.regenerate("JK200")

        assert sheet["name"] == "Trousers"
        assert service.get_sheet("JK200") == sheet

    def test_unknown_identifier(self, service):
        with pytest.raises(SheetNotFoundError):
            service.regenerate("JK999")

    def test_persist_failure_returned(self, service, mock_supabase):
        mock_supabase.fail_operations = True

        sheet, failure = service.regenerate("JK100")

        assert sheet["id"] == "JK100"
        assert failure.product_id == "JK100"


# ===================
# REVIEW / EDIT / LOAD
# ===================

class TestUpdateSheet:
    """Tests for SheetService.update_sheet()"""

    def test_updates_and_persists(self, service, mock_supabase):
        service.generate_all()

        sheet, failure = service.update_sheet("JK200", {"name": "Slim Chinos", "description": "Custom"})

        assert sheet["name"] == "Slim Chinos"
        assert sheet["description"] == "Custom"
        assert failure is None
        stored = [r for r in mock_supabase.rows("product_sheets") if r["id"] == "JK200"][0]
        assert stored["data"]["name"] == "Slim Chinos"

    def test_unknown_sheet(self, service):
        with pytest.raises(SheetNotFoundError):
            service.update_sheet("JK100", {"name": "x"})

    def test_identifier_immutable(self, service):
        service.generate_all()

        with pytest.raises(ImmutableFieldError):
            service.update_sheet("JK100", {"id": "JK101"})

    def test_same_identifier_allowed(self, service):
        service.generate_all()

        sheet, _ = service.update_sheet("JK100", {"id": "JK100", "size": "L"})

        assert sheet["size"] == "L"


class TestLoadSheets:
    """Tests for SheetService.load_sheets()"""

    def test_replaces_memory(self, service, mock_supabase):
        mock_supabase.set_table_data("product_sheets", [
            {"id": "JK7", "data": {"id": "JK7", "name": "Saved"}},
        ])

        sheets = service.load_sheets()

        assert sheets == {"JK7": {"id": "JK7", "name": "Saved"}}
        assert service.get_all() == sheets

    def test_store_failure_keeps_memory(self, service, mock_supabase):
        service.generate_all()
        mock_supabase.fail_operations = True

        with pytest.raises(DatabaseError):
            service.load_sheets()

        assert len(service.get_all()) == 3

    def test_get_sheet_returns_copy(self, service):
        service.generate_all()

        sheet = service.get_sheet("JK100")
        sheet["name"] = "Changed"

        assert service.get_sheet("JK100")["name"] == "Shirt"
