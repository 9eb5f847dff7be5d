"""
Unit tests for ApplicationService.

Run: pytest tests/unit/test_application_service.py -v
"""

import pytest
from unittest.mock import MagicMock, patch

from services.application_service import ApplicationService, get_application_service
from models.application import ApplicationCreate, ApplicationUpdate
from exceptions import ApplicationNotFoundError, DatabaseError

from tests.factories import ApplicationFactory

TABLE = "scholarship_application"


@pytest.fixture
def sample_applications():
    return [
        ApplicationFactory.create(id="app-1", student_id="2016000001", student_name="张三"),
        ApplicationFactory.create_huawei(id="app-2", student_id="2016000002"),
    ]


class TestApplicationServiceRead:
    """Tests for listing and lookup."""

    def test_list_all_includes_student(self, mock_db, mock_supabase, sample_applications):
        """Should return applications with joined student."""
        # Arrange
        mock_supabase.set_table_data(TABLE, sample_applications)
        service = ApplicationService()

        # Act
        applications = service.list_all()

        # Assert
        assert len(applications) == 2
        assert applications[0].student.name == "张三"
        assert applications[0].student.class_name == "无61"
        assert applications[1].scholarship == "清华之友——华为奖学金"

    def test_list_all_ordered_by_student(self, mock_db, mock_supabase, sample_applications):
        # Arrange
        mock_supabase.set_table_data(TABLE, list(reversed(sample_applications)))
        service = ApplicationService()

        # Act
        applications = service.list_all()

        # Assert
        assert [a.student_id for a in applications] == ["2016000001", "2016000002"]

    def test_list_all_empty(self, mock_db, mock_supabase):
        # Arrange
        mock_supabase.set_table_data(TABLE, [])
        service = ApplicationService()

        # Act / Assert
        assert service.list_all() == []

    def test_list_for_student(self, mock_db, mock_supabase, sample_applications):
        # Arrange
        mock_supabase.set_table_data(TABLE, sample_applications)
        service = ApplicationService()

        # Act
        applications = service.list_for_student("2016000001")

        # Assert
        assert [a.id for a in applications] == ["app-1"]

    def test_numeric_student_id_coerced(self, mock_db, mock_supabase):
        # Arrange
        record = ApplicationFactory.create(id="app-9")
        record["student_id"] = 2016000009
        mock_supabase.set_table_data(TABLE, [record])
        service = ApplicationService()

        # Act
        application = service.get_by_id("app-9")

        # Assert
        assert application.student_id == "2016000009"

    def test_get_by_id_not_found(self, mock_db, mock_supabase):
        # Arrange
        mock_supabase.set_table_data(TABLE, [])
        service = ApplicationService()

        # Act / Assert
        with pytest.raises(ApplicationNotFoundError) as exc_info:
            service.get_by_id("missing")

        assert exc_info.value.status_code == 404
        assert exc_info.value.details["id"] == "missing"

    def test_form_url_link_detection(self, mock_db, mock_supabase):
        # Arrange
        mock_supabase.set_table_data(TABLE, [
            ApplicationFactory.create(id="a", form_url="https://forms.example.com/1"),
            ApplicationFactory.create(id="b", form_url="see attachment"),
        ])
        service = ApplicationService()

        # Act
        applications = service.list_all()

        # Assert
        assert applications[0].form_url_is_link is True
        assert applications[1].form_url_is_link is False


class TestApplicationServiceWrite:
    """Tests for create, update and delete."""

    def test_create(self, mock_db, mock_supabase):
        # Arrange
        service = ApplicationService()
        data = ApplicationCreate(
            student_id="2016000001",
            scholarship="好读书奖学金",
            honor="好读书奖",
            code="J3032030",
            amount=3000,
        )

        # Act
        application = service.create(data)

        # Assert
        assert application.id == "test-uuid-123"
        assert application.code == "J3032030"
        assert application.student is None

    def test_update_thank_letter(self, mock_db, mock_supabase, sample_applications):
        # Arrange
        mock_supabase.set_table_data(TABLE, sample_applications)
        service = ApplicationService()

        # Act
        application = service.update("app-1", ApplicationUpdate(thank_letter="感谢资助"))

        # Assert
        assert application.thank_letter == "感谢资助"
        assert application.amount == 3000

    def test_update_nothing_returns_existing(self, mock_db, mock_supabase, sample_applications):
        # Arrange
        mock_supabase.set_table_data(TABLE, sample_applications)
        service = ApplicationService()

        # Act
        application = service.update("app-1", ApplicationUpdate())

        # Assert
        assert application.id == "app-1"

    def test_update_not_found(self, mock_db, mock_supabase):
        mock_supabase.set_table_data(TABLE, [])
        service = ApplicationService()

        with pytest.raises(ApplicationNotFoundError):
            service.update("missing", ApplicationUpdate(form_url="https://example.com"))

    def test_delete(self, mock_db, mock_supabase, sample_applications):
        mock_supabase.set_table_data(TABLE, sample_applications)
        service = ApplicationService()

        assert service.delete("app-1") is True

    def test_delete_not_found(self, mock_db, mock_supabase):
        mock_supabase.set_table_data(TABLE, [])
        service = ApplicationService()

        with pytest.raises(ApplicationNotFoundError):
            service.delete("missing")


class TestApplicationServiceErrors:
    """Database failures become DatabaseError."""

    def test_list_all_database_error(self):
        # Arrange
        client = MagicMock()
        client.table.side_effect = RuntimeError("connection reset")

        with patch("services.application_service.get_supabase_client", return_value=client):
            service = ApplicationService()

        # Act / Assert
        with pytest.raises(DatabaseError) as exc_info:
            service.list_all()

        assert "connection reset" in exc_info.value.message
        assert exc_info.value.details["operation"] == "select"

    def test_create_database_error(self):
        client = MagicMock()
        client.table.return_value.insert.return_value.execute.side_effect = RuntimeError("duplicate key")

        with patch("services.application_service.get_supabase_client", return_value=client):
            service = ApplicationService()

        with pytest.raises(DatabaseError) as exc_info:
            service.create(ApplicationCreate(
                student_id="2016000001",
                scholarship="好读书奖学金",
                honor="好读书奖",
                code="J3032030",
                amount=3000,
            ))

        assert exc_info.value.details["operation"] == "insert"


class TestSingleton:
    """Tests for get_application_service()."""

    def test_returns_same_instance(self, mock_db):
        with patch("services.application_service._application_service", None):
            first = get_application_service()
            second = get_application_service()

        assert first is second
