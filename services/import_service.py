"""
Bulk import of scholarship applications from a spreadsheet.

Pipeline:
    1. Decode the uploaded .xlsx into candidate rows
    2. Validate every row against the catalog (first error aborts, nothing written)
    3. Submit rows concurrently to the application store
    4. Yield a progress event per resolved row, then a final report

A failed submission is recorded and the remaining rows carry on. Writes
already issued are never rolled back.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from io import BytesIO
from typing import Callable, Iterator, Optional, Protocol, Union
import structlog

from config import get_catalog, settings
from config.catalog import Catalog
from exceptions import SubmissionError
from models.application import ApplicationCreate
from models.import_job import (
    ImportOutcome,
    ImportProgress,
    ImportReport,
    OutcomeStatus,
)
from parsers.spreadsheet_codec import decode
from services.application_service import get_application_service
from services.validation_service import RecordValidator

logger = structlog.get_logger(__name__)

ImportEvent = Union[ImportProgress, ImportReport]


class ApplicationStore(Protocol):
    """Anything that can persist one application (see ApplicationService)."""

    def create(self, data: ApplicationCreate): ...


class ImportService:
    """
    Runs spreadsheet imports against an application store.

    Args:
        catalog: Catalog rows are validated against
        store: Target for created applications
        max_workers: Concurrent submissions; None means one worker per row
        on_change: Called once after all rows resolve (e.g. refresh listings)
    """

    def __init__(
        self,
        catalog: Catalog,
        store: ApplicationStore,
        max_workers: Optional[int] = None,
        on_change: Optional[Callable[[], None]] = None,
    ):
        if max_workers is not None and max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.validator = RecordValidator(catalog)
        self.store = store
        self.max_workers = max_workers
        self.on_change = on_change

    def run(self, data: Union[bytes, BytesIO]) -> Iterator[ImportEvent]:
        """
        Decode and validate the file, then stream submission events.

        Decoding and validation happen before this returns, so a bad file
        raises here and no row is ever submitted.

        Args:
            data: Uploaded .xlsx content

        Returns:
            Iterator of ImportProgress events ending with one ImportReport

        Raises:
            DecodeError: File is not a readable spreadsheet
            RowValidationError: First invalid row (structure, catalog or amount)
        """
        logger.info("import_started")

        rows = decode(data)
        validated = self.validator.validate_all(rows)

        return self._submit_all(validated)

    def import_file(
        self,
        data: Union[bytes, BytesIO],
        on_progress: Optional[Callable[[ImportProgress], None]] = None,
    ) -> ImportReport:
        """
        Run a whole import and return the final report.

        Args:
            data: Uploaded .xlsx content
            on_progress: Optional callback for each progress event
        """
        report = None
        for event in self.run(data):
            if isinstance(event, ImportReport):
                report = event
            elif on_progress is not None:
                on_progress(event)
        return report

    # ===================
    # SUBMISSION
    # ===================

    def _submit_all(
        self,
        validated: list[tuple[int, ApplicationCreate]],
    ) -> Iterator[ImportEvent]:
        total = len(validated)
        outcomes: list[ImportOutcome] = []
        errors: list[dict] = []
        succeeded = 0
        failed = 0

        if total:
            workers = min(self.max_workers or total, total)
            logger.info("import_submission_started", total=total, max_workers=workers)

            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = [
                    executor.submit(self._submit_row, row_index, record)
                    for row_index, record in validated
                ]

                # Counters are only touched here, in the consuming thread
                for future in as_completed(futures):
                    outcome, error = future.result()
                    outcomes.append(outcome)

                    if error is None:
                        succeeded += 1
                    else:
                        failed += 1
                        errors.append(error.to_dict()["error"])

                    yield ImportProgress(
                        completed=succeeded + failed,
                        total=total,
                        succeeded=succeeded,
                        failed=failed,
                        outcome=outcome,
                    )

            self._notify_change()

        outcomes.sort(key=lambda o: o.row_index)
        errors.sort(key=lambda e: e["details"]["row"])

        logger.info(
            "import_completed",
            total=total,
            succeeded=succeeded,
            failed=failed,
        )

        yield ImportReport(
            total=total,
            succeeded=succeeded,
            failed=failed,
            outcomes=outcomes,
            errors=errors,
        )

    def _submit_row(
        self,
        row_index: int,
        record: ApplicationCreate,
    ) -> tuple[ImportOutcome, Optional[SubmissionError]]:
        """Create one application; failures are returned, not raised."""
        try:
            created = self.store.create(record)
        except Exception as e:
            error = SubmissionError(
                row=row_index,
                message=getattr(e, "message", None) or str(e) or type(e).__name__,
                details={
                    "student_id": record.student_id,
                    "scholarship": record.scholarship,
                    "code": record.code,
                    "error_type": type(e).__name__,
                },
            )
            logger.warning(
                "row_submission_failed",
                row=row_index,
                student_id=record.student_id,
                error=str(e),
            )
            return ImportOutcome(
                row_index=row_index,
                status=OutcomeStatus.FAILED,
                error=error.message,
            ), error

        return ImportOutcome(
            row_index=row_index,
            status=OutcomeStatus.SUCCESS,
            record_id=str(created.id),
        ), None

    def _notify_change(self) -> None:
        if self.on_change is None:
            return
        try:
            self.on_change()
        except Exception as e:
            # Refresh failures never replace the report
            logger.error("import_refresh_failed", error=str(e))


def announce_applications_changed() -> None:
    """Post-import hook: the listing is stale and clients should refetch it."""
    logger.info("applications_changed", table=settings.applications_table)


def get_import_service() -> ImportService:
    """ImportService bound to the catalog and the application table."""
    return ImportService(
        catalog=get_catalog(),
        store=get_application_service(),
        max_workers=settings.import_max_workers,
        on_change=announce_applications_changed,
    )
