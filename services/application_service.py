"""
Scholarship application storage service.

Thin CRUD layer over the applications table. Import and export build on
top of it; this module holds no import/export logic itself.
"""

from typing import Optional
import structlog

from config import get_supabase_client, settings
from models.application import (
    ApplicationCreate,
    ApplicationUpdate,
    ScholarshipApplicationResponse,
)
from exceptions import ApplicationNotFoundError, DatabaseError

logger = structlog.get_logger(__name__)

# Counselor listing joins the student record
SELECT_WITH_STUDENT = "*, student(id, name, class, department)"


class ApplicationService:
    """
    Scholarship application business logic.

    Handles CRUD operations for applications.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = settings.applications_table

    # ===================
    # READ OPERATIONS
    # ===================

    def list_all(self) -> list[ScholarshipApplicationResponse]:
        """
        Get every application with its student (counselor view).

        Returns:
            List of ScholarshipApplicationResponse
        """
        logger.info("listing_applications")

        try:
            result = (
                self.db.table(self.table)
                .select(SELECT_WITH_STUDENT)
                .order("student_id")
                .execute()
            )

            applications = [ScholarshipApplicationResponse(**row) for row in result.data]

            logger.info("applications_listed", count=len(applications))
            return applications

        except Exception as e:
            logger.error("list_applications_failed", error=str(e))
            raise DatabaseError("select", str(e))

    def list_for_student(self, student_id: str) -> list[ScholarshipApplicationResponse]:
        """
        Get one student's own applications.

        Args:
            student_id: Student number

        Returns:
            List of ScholarshipApplicationResponse
        """
        logger.info("listing_student_applications", student_id=student_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("student_id", student_id)
                .execute()
            )

            return [ScholarshipApplicationResponse(**row) for row in result.data]

        except Exception as e:
            logger.error(
                "list_student_applications_failed",
                student_id=student_id,
                error=str(e)
            )
            raise DatabaseError("select", str(e))

    def get_by_id(self, application_id: str) -> ScholarshipApplicationResponse:
        """
        Get a single application by ID.

        Raises:
            ApplicationNotFoundError: If application doesn't exist
        """
        logger.debug("getting_application", application_id=application_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("id", application_id)
                .execute()
            )

            if not result.data:
                raise ApplicationNotFoundError(application_id)

            return ScholarshipApplicationResponse(**result.data[0])

        except ApplicationNotFoundError:
            raise
        except Exception as e:
            logger.error(
                "get_application_failed",
                application_id=application_id,
                error=str(e)
            )
            raise DatabaseError("select", str(e))

    # ===================
    # WRITE OPERATIONS
    # ===================

    def create(self, data: ApplicationCreate) -> ScholarshipApplicationResponse:
        """
        Create a new application.

        Args:
            data: Validated application data

        Returns:
            Created ScholarshipApplicationResponse
        """
        logger.info(
            "creating_application",
            student_id=data.student_id,
            scholarship=data.scholarship,
            code=data.code
        )

        try:
            result = (
                self.db.table(self.table)
                .insert(data.model_dump())
                .execute()
            )

            application = ScholarshipApplicationResponse(**result.data[0])

            logger.info(
                "application_created",
                application_id=application.id,
                student_id=application.student_id
            )

            return application

        except Exception as e:
            logger.error(
                "create_application_failed",
                student_id=data.student_id,
                error=str(e)
            )
            raise DatabaseError("insert", str(e))

    def update(
        self,
        application_id: str,
        data: ApplicationUpdate
    ) -> ScholarshipApplicationResponse:
        """
        Update the form link and/or thank-you letter.

        Only fields present in the request are written, so a field can be
        cleared by sending null.

        Raises:
            ApplicationNotFoundError: If application doesn't exist
        """
        logger.info("updating_application", application_id=application_id)

        existing = self.get_by_id(application_id)

        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            return existing

        try:
            result = (
                self.db.table(self.table)
                .update(update_data)
                .eq("id", application_id)
                .execute()
            )

            application = ScholarshipApplicationResponse(**result.data[0])

            logger.info(
                "application_updated",
                application_id=application_id,
                fields=list(update_data.keys())
            )

            return application

        except Exception as e:
            logger.error(
                "update_application_failed",
                application_id=application_id,
                error=str(e)
            )
            raise DatabaseError("update", str(e))

    def delete(self, application_id: str) -> bool:
        """
        Permanently delete an application.

        Raises:
            ApplicationNotFoundError: If application doesn't exist
        """
        logger.info("deleting_application", application_id=application_id)

        self.get_by_id(application_id)

        try:
            (
                self.db.table(self.table)
                .delete()
                .eq("id", application_id)
                .execute()
            )

            logger.info("application_deleted", application_id=application_id)
            return True

        except Exception as e:
            logger.error(
                "delete_application_failed",
                application_id=application_id,
                error=str(e)
            )
            raise DatabaseError("delete", str(e))


# Singleton instance
_application_service: Optional[ApplicationService] = None


def get_application_service() -> ApplicationService:
    """Get or create ApplicationService instance."""
    global _application_service
    if _application_service is None:
        _application_service = ApplicationService()
    return _application_service
