import logging
from dataclasses import dataclass

from job_tracker.services.storage import LocalResumeStorage
from job_tracker.store import ApplicationRecord, ApplicationStore

logger = logging.getLogger(__name__)

# Wire name -> column attribute
SORT_FIELDS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "dateApplied": "date_applied",
    "jobTitle": "job_title",
    "company": "company",
    "status": "status",
    "jobPlatform": "job_platform",
}


class ApplicationNotFound(Exception):
    """Raised for applications that do not exist or belong to another user.

    Both cases are deliberately indistinguishable to the caller.
    """

    status_code = 404
    message = "Application not found"


@dataclass(frozen=True)
class ResumeUpload:
    filename: str
    contents: bytes


@dataclass(frozen=True)
class ApplicationPage:
    applications: list[ApplicationRecord]
    total: int
    page: int
    limit: int

    @property
    def has_next_page(self) -> bool:
        return self.page * self.limit < self.total


def create_application(
    store: ApplicationStore,
    storage: LocalResumeStorage,
    user_id: int,
    fields: dict,
    resume: ResumeUpload | None = None,
) -> ApplicationRecord:
    resume_url = None
    if resume is not None:
        resume_url = storage.save(user_id, resume.filename, resume.contents)

    application = store.insert(user_id, resume_url=resume_url, **fields)
    logger.info("User %d created application %d", user_id, application.id)
    return application


def list_applications(
    store: ApplicationStore,
    user_id: int,
    *,
    status: str | None = None,
    platform: str | None = None,
    search: str | None = None,
    sort_by: str = "createdAt",
    order: str = "desc",
    page: int = 1,
    limit: int = 10,
) -> ApplicationPage:
    """List the user's applications, newest first unless told otherwise."""
    applications, total = store.list_for_user(
        user_id,
        status=status or None,
        platform=platform or None,
        search=search.strip() if search else None,
        sort_by=SORT_FIELDS[sort_by],
        descending=order == "desc",
        offset=(page - 1) * limit,
        limit=limit,
    )
    return ApplicationPage(applications=applications, total=total, page=page, limit=limit)


def get_application(store: ApplicationStore, user_id: int, application_id: int) -> ApplicationRecord:
    application = store.find_by_id(user_id, application_id)
    if application is None:
        raise ApplicationNotFound()
    return application


def update_application(
    store: ApplicationStore,
    storage: LocalResumeStorage,
    user_id: int,
    application_id: int,
    fields: dict,
    resume: ResumeUpload | None = None,
) -> ApplicationRecord:
    """Apply a partial update. The stored resume is kept unless a new file comes in."""
    # Check ownership before touching storage so a foreign id never uploads anything
    get_application(store, user_id, application_id)

    values = dict(fields)
    values.pop("resume_url", None)
    if resume is not None:
        values["resume_url"] = storage.save(user_id, resume.filename, resume.contents)

    application = store.update_fields(user_id, application_id, **values)
    if application is None:
        # Deleted between the ownership check and the write
        raise ApplicationNotFound()
    return application


def delete_application(store: ApplicationStore, user_id: int, application_id: int) -> None:
    if not store.delete(user_id, application_id):
        raise ApplicationNotFound()
    logger.info("User %d deleted application %d", user_id, application_id)
