"""
Scholarship application API routes.

Students read and edit their own applications; counselors list, search,
import, export and delete.
"""

from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, File, Query, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response, StreamingResponse
import structlog

from exceptions import AppError
from models.application import (
    ApplicationCreate,
    ApplicationListResponse,
    ApplicationUpdate,
    ScholarshipApplicationResponse,
)
from models.export import ExportSelection
from models.import_job import ImportReport
from services.application_service import get_application_service
from services.export_service import ExportFile, get_export_service
from services.import_service import get_import_service
from services.search_service import filter_exact, search
from services.validation_service import get_record_validator

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/applications", tags=["Scholarship Applications"])


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# HELPERS
# ===================

async def _read_upload(file: UploadFile) -> bytes:
    """Read an uploaded .xlsx, rejecting other types and empty files."""
    if not file.filename or not file.filename.lower().endswith(".xlsx"):
        raise AppError(
            code="INVALID_FILE_TYPE",
            message="File must be an Excel file (.xlsx)",
            status_code=400,
        )

    content = await file.read()
    if len(content) == 0:
        raise AppError(
            code="EMPTY_FILE",
            message="Uploaded file is empty",
            status_code=400,
        )
    return content


def _download(export: ExportFile) -> Response:
    """Attachment response; filename is UTF-8 encoded per RFC 5987."""
    return Response(
        content=export.content,
        media_type=export.media_type,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(export.filename)}",
            "X-Row-Count": str(export.row_count),
        },
    )


# ===================
# ROUTES
# ===================

@router.get("", response_model=ApplicationListResponse)
async def list_applications(
    student_id: Optional[str] = Query(None, description="Only this student's applications"),
    honor: list[str] = Query(default=[], description="Keep only these honors"),
    scholarship: list[str] = Query(default=[], description="Keep only these scholarships"),
):
    """
    List applications.

    With student_id: the student's own applications.
    Without: every application with its student (counselor view).
    """
    try:
        service = get_application_service()

        if student_id:
            applications = service.list_for_student(student_id)
        else:
            applications = service.list_all()

        applications = filter_exact(applications, "honor", honor)
        applications = filter_exact(applications, "scholarship", scholarship)

        return ApplicationListResponse(data=applications, total=len(applications))

    except Exception as e:
        return handle_error(e)


@router.get("/search", response_model=ApplicationListResponse)
async def search_applications(
    field: str = Query(..., description="Field path, e.g. student.name"),
    q: str = Query("", description="Case-insensitive text to look for"),
):
    """Substring search over the counselor listing."""
    try:
        applications = search(get_application_service().list_all(), field, q)

        logger.info("applications_searched", field=field, matched=len(applications))

        return ApplicationListResponse(data=applications, total=len(applications))

    except Exception as e:
        return handle_error(e)


@router.post("", response_model=ScholarshipApplicationResponse, status_code=201)
async def create_application(data: ApplicationCreate):
    """
    Add one application record.

    Raises:
        422: Scholarship, honor, code or amount not allowed by the catalog
    """
    try:
        get_record_validator().validate_application(data)
        return get_application_service().create(data)

    except Exception as e:
        return handle_error(e)


@router.patch("/{application_id}", response_model=ScholarshipApplicationResponse)
async def update_application(application_id: str, data: ApplicationUpdate):
    """
    Update the form link and thank-you letter.

    Raises:
        404: Application not found
    """
    try:
        return get_application_service().update(application_id, data)

    except Exception as e:
        return handle_error(e)


@router.delete("/{application_id}", status_code=204)
async def delete_application(application_id: str):
    """
    Delete an application permanently.

    Raises:
        404: Application not found
    """
    try:
        get_application_service().delete(application_id)
        return None  # 204 No Content

    except Exception as e:
        return handle_error(e)


# ===================
# IMPORT / EXPORT
# ===================

@router.post("/import", response_model=ImportReport)
async def import_applications(file: UploadFile = File(..., description="Excel file (.xlsx)")):
    """
    Import applications from a spreadsheet.

    Every row is validated before anything is written. Rows that the
    database rejects are listed in the report; the rest are kept. Clients
    refetch the listing once the report arrives.

    Raises:
        400: Not an .xlsx file, or empty
        422: Unreadable file or invalid row (nothing imported)
    """
    logger.info("import_upload_received", filename=file.filename)

    try:
        content = await _read_upload(file)
        service = get_import_service()
        return await run_in_threadpool(service.import_file, content)

    except Exception as e:
        return handle_error(e)


@router.post("/import/stream")
async def import_applications_stream(file: UploadFile = File(..., description="Excel file (.xlsx)")):
    """
    Import applications, streaming progress as NDJSON.

    One line per resolved row ({"event": "progress", ...}) and a final
    {"event": "report", ...} line. File and row errors are returned before
    streaming starts, with nothing imported.
    """
    logger.info("import_stream_upload_received", filename=file.filename)

    try:
        content = await _read_upload(file)
        service = get_import_service()
        events = await run_in_threadpool(service.run, content)

    except Exception as e:
        return handle_error(e)

    def lines():
        for event in events:
            yield event.model_dump_json() + "\n"

    return StreamingResponse(lines(), media_type="application/x-ndjson")


@router.post("/export")
async def export_applications(selection: ExportSelection):
    """
    Download applications matching a scholarship/class selection as .xlsx.

    Raises:
        404: Nothing matches the selection
    """
    try:
        applications = get_application_service().list_all()
        export = await run_in_threadpool(
            get_export_service().export, applications, selection
        )
        return _download(export)

    except Exception as e:
        return handle_error(e)


@router.get("/import-template")
async def download_import_template():
    """Sample spreadsheet in the import layout."""
    try:
        export = await run_in_threadpool(get_export_service().generate_import_template)
        return _download(export)

    except Exception as e:
        return handle_error(e)
