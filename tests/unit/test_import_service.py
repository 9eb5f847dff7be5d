"""
Unit tests for the bulk import pipeline.

Uses an in-memory store so submissions, failures and concurrency can be
observed without a database.
"""

import threading
import pytest
from unittest.mock import MagicMock, patch

from exceptions import DecodeError, StructuralError, UnknownCodeError
from models.import_job import ImportProgress, ImportReport, OutcomeStatus
from services.import_service import (
    ImportService,
    announce_applications_changed,
    get_import_service,
)
from tests.factories import FakeApplicationStore, build_workbook, import_row


def three_rows() -> bytes:
    return build_workbook([
        import_row(student_id="2016000001"),
        import_row(student_id="2016000002", code="J3032080", amount=8000),
        import_row(
            student_id="2016000003",
            scholarship="清华之友——华为奖学金",
            honor="学业优秀奖",
            code="J2022050",
            amount=5000,
        ),
    ])


# ===================
# SUCCESSFUL IMPORTS
# ===================

class TestSuccessfulImport:
    """All rows valid and stored."""

    def test_all_rows_stored(self, catalog):
        store = FakeApplicationStore()
        service = ImportService(catalog, store)

        report = service.import_file(three_rows())

        assert report.total == 3
        assert report.succeeded == 3
        assert report.failed == 0
        assert report.success is True
        assert report.summary == "3 of 3 succeeded"
        assert sorted(r.student_id for r in store.created) == [
            "2016000001", "2016000002", "2016000003",
        ]

    def test_outcomes_in_sheet_order(self, catalog):
        service = ImportService(catalog, FakeApplicationStore(delay=0.01))

        report = service.import_file(three_rows())

        assert [o.row_index for o in report.outcomes] == [2, 3, 4]
        assert all(o.status == OutcomeStatus.SUCCESS for o in report.outcomes)
        assert all(o.record_id for o in report.outcomes)

    def test_events_end_with_single_report(self, catalog):
        service = ImportService(catalog, FakeApplicationStore())

        events = list(service.run(three_rows()))

        assert len(events) == 4
        assert all(isinstance(e, ImportProgress) for e in events[:-1])
        assert isinstance(events[-1], ImportReport)

    def test_progress_is_monotonic(self, catalog):
        service = ImportService(catalog, FakeApplicationStore(delay=0.01))
        progress = []

        service.import_file(three_rows(), on_progress=progress.append)

        assert [p.completed for p in progress] == [1, 2, 3]
        assert [p.percent for p in progress] == [33, 67, 100]
        assert all(p.total == 3 for p in progress)
        assert all(p.succeeded + p.failed == p.completed for p in progress)

    def test_on_change_called_once(self, catalog):
        on_change = MagicMock()
        service = ImportService(catalog, FakeApplicationStore(), on_change=on_change)

        service.import_file(three_rows())

        on_change.assert_called_once_with()

    def test_header_only_file(self, catalog):
        store = FakeApplicationStore()
        on_change = MagicMock()
        service = ImportService(catalog, store, on_change=on_change)

        report = service.import_file(build_workbook([]))

        assert report.total == 0
        assert report.outcomes == []
        assert store.attempts == 0
        on_change.assert_not_called()


# ===================
# VALIDATION ABORTS
# ===================

class TestValidationAborts:
    """A bad row stops the import before any write."""

    def test_unknown_code_aborts_whole_import(self, catalog):
        store = FakeApplicationStore()
        on_change = MagicMock()
        service = ImportService(catalog, store, on_change=on_change)
        content = build_workbook([
            import_row(student_id="2016000001"),
            import_row(student_id="2016000002"),
            import_row(student_id="2016000003", code="J0000000"),
        ])

        with pytest.raises(UnknownCodeError) as exc_info:
            service.import_file(content)

        assert exc_info.value.row == 4
        assert store.attempts == 0
        on_change.assert_not_called()

    def test_run_raises_before_returning_events(self, catalog):
        """Errors surface from run() itself, not from iteration."""
        store = FakeApplicationStore()
        service = ImportService(catalog, store)
        content = build_workbook([["", "2016000001", "张三"]])

        with pytest.raises(StructuralError):
            service.run(content)

        assert store.attempts == 0

    def test_unreadable_file(self, catalog):
        store = FakeApplicationStore()
        service = ImportService(catalog, store)

        with pytest.raises(DecodeError):
            service.import_file(b"not a spreadsheet")

        assert store.attempts == 0


# ===================
# SUBMISSION FAILURES
# ===================

class TestSubmissionFailures:
    """Rows the store rejects are reported, the rest are kept."""

    def test_second_row_fails(self, catalog):
        store = FakeApplicationStore(fail_student_ids={"2016000002"})
        service = ImportService(catalog, store)
        progress = []

        report = service.import_file(three_rows(), on_progress=progress.append)

        assert report.succeeded == 2
        assert report.failed == 1
        assert report.success is False
        assert progress[-1].completed == 3
        assert len(store.created) == 2

        failed = [o for o in report.outcomes if o.status == OutcomeStatus.FAILED]
        assert [o.row_index for o in failed] == [3]
        assert "insert rejected" in failed[0].error

    def test_failure_detail_names_row(self, catalog):
        store = FakeApplicationStore(fail_student_ids={"2016000002"})
        service = ImportService(catalog, store)

        report = service.import_file(three_rows())

        assert len(report.errors) == 1
        error = report.errors[0]
        assert error["code"] == "ROW_SUBMISSION_FAILED"
        assert error["details"]["row"] == 3
        assert error["details"]["student_id"] == "2016000002"
        assert error["details"]["error_type"] == "RuntimeError"

    def test_partial_failure_accounting(self, catalog):
        rows = [import_row(student_id=str(2016000001 + i)) for i in range(5)]
        store = FakeApplicationStore(fail_student_ids={"2016000002", "2016000005"})
        service = ImportService(catalog, store)

        report = service.import_file(build_workbook(rows))

        assert report.total == 5
        assert report.succeeded == 3
        assert report.failed == 2
        assert store.attempts == 5
        assert [e["details"]["row"] for e in report.errors] == [3, 6]

    def test_all_rows_fail(self, catalog):
        store = FakeApplicationStore(fail_student_ids={"2016000001", "2016000002", "2016000003"})
        on_change = MagicMock()
        service = ImportService(catalog, store, on_change=on_change)

        report = service.import_file(three_rows())

        assert report.succeeded == 0
        assert report.failed == 3
        assert report.summary == "0 of 3 succeeded"
        on_change.assert_called_once_with()

    def test_refresh_failure_keeps_report(self, catalog):
        on_change = MagicMock(side_effect=RuntimeError("listing unavailable"))
        service = ImportService(catalog, FakeApplicationStore(), on_change=on_change)

        report = service.import_file(three_rows())

        assert report.succeeded == 3


# ===================
# CONCURRENCY
# ===================

class TestConcurrency:
    """Submission fan-out."""

    def test_unbounded_runs_rows_together(self, catalog):
        """Every create waits on a 3-party barrier, so all three must overlap."""
        barrier = threading.Barrier(3, timeout=5)
        store = FakeApplicationStore(barrier=barrier)
        service = ImportService(catalog, store)

        report = service.import_file(three_rows())

        assert report.succeeded == 3
        assert store.max_in_flight == 3

    def test_max_workers_caps_in_flight(self, catalog):
        rows = [import_row(student_id=str(2016000001 + i)) for i in range(6)]
        store = FakeApplicationStore(delay=0.02)
        service = ImportService(catalog, store, max_workers=2)

        report = service.import_file(build_workbook(rows))

        assert report.succeeded == 6
        assert store.max_in_flight <= 2

    def test_single_worker_is_sequential(self, catalog):
        store = FakeApplicationStore(delay=0.01)
        service = ImportService(catalog, store, max_workers=1)

        service.import_file(three_rows())

        assert store.max_in_flight == 1
        assert [r.student_id for r in store.created] == [
            "2016000001", "2016000002", "2016000003",
        ]

    def test_invalid_max_workers(self, catalog):
        with pytest.raises(ValueError):
            ImportService(catalog, FakeApplicationStore(), max_workers=0)


class TestDefaultService:
    """Tests for get_import_service()."""

    def test_announces_change_after_import(self):
        with patch("services.import_service.get_application_service") as get_store:
            get_store.return_value = FakeApplicationStore()
            service = get_import_service()

        with patch("services.import_service.logger") as logger:
            service.import_file(three_rows())

        assert service.on_change is announce_applications_changed
        logger.info.assert_any_call("applications_changed", table="scholarship_application")
