"""Persistence for users and job applications.

Store methods hand back frozen dataclass records built from the ORM rows, so
callers never hold (or mutate) a live SQLAlchemy object. Writes commit
immediately; a failed commit is rolled back and the error re-raised.
"""

from dataclasses import dataclass, fields
from datetime import datetime

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from job_tracker.models import JobApplication, User


@dataclass(frozen=True)
class UserRecord:
    id: int
    display_name: str
    email: str
    google_id: str | None = None
    photo: str | None = None
    password_hash: str | None = None
    reset_password_token: str | None = None
    reset_password_expires: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def has_password(self) -> bool:
        return self.password_hash is not None


@dataclass(frozen=True)
class ApplicationRecord:
    id: int
    user_id: int
    job_title: str
    company: str
    description: str
    date_applied: str
    status: str
    job_platform: str
    job_url: str
    resume_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


def _to_record(record_cls, row):
    return record_cls(**{f.name: getattr(row, f.name) for f in fields(record_cls)})


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class _BaseStore:
    def __init__(self, db: Session):
        self.db = db

    def _commit(self) -> None:
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise


class UserStore(_BaseStore):
    """Credential store: one row per account."""

    def insert(self, **values) -> UserRecord:
        user = User(**values)
        self.db.add(user)
        self._commit()
        self.db.refresh(user)
        return _to_record(UserRecord, user)

    def find_by_id(self, user_id: int) -> UserRecord | None:
        user = self.db.get(User, user_id)
        return _to_record(UserRecord, user) if user else None

    def find_by_email(self, email: str) -> UserRecord | None:
        user = self.db.query(User).filter(func.lower(User.email) == email.lower()).first()
        return _to_record(UserRecord, user) if user else None

    def find_by_google_id(self, google_id: str) -> UserRecord | None:
        user = self.db.query(User).filter(User.google_id == google_id).first()
        return _to_record(UserRecord, user) if user else None

    def find_by_reset_token(self, token_hash: str, now: datetime) -> UserRecord | None:
        """Find the user holding an unexpired reset token with this digest."""
        user = (
            self.db.query(User)
            .filter(
                User.reset_password_token == token_hash,
                User.reset_password_expires > now,
            )
            .first()
        )
        return _to_record(UserRecord, user) if user else None

    def update_fields(self, user_id: int, **values) -> UserRecord | None:
        user = self.db.get(User, user_id)
        if user is None:
            return None
        for key, value in values.items():
            setattr(user, key, value)
        self._commit()
        self.db.refresh(user)
        return _to_record(UserRecord, user)


class ApplicationStore(_BaseStore):
    """Job applications, always addressed through their owner's id."""

    # Attribute names accepted as sort keys
    SORTABLE = {
        "created_at",
        "updated_at",
        "date_applied",
        "job_title",
        "company",
        "status",
        "job_platform",
    }

    def _owned(self, user_id: int, application_id: int) -> JobApplication | None:
        return (
            self.db.query(JobApplication)
            .filter(JobApplication.id == application_id, JobApplication.user_id == user_id)
            .first()
        )

    def insert(self, user_id: int, **values) -> ApplicationRecord:
        application = JobApplication(user_id=user_id, **values)
        self.db.add(application)
        self._commit()
        self.db.refresh(application)
        return _to_record(ApplicationRecord, application)

    def find_by_id(self, user_id: int, application_id: int) -> ApplicationRecord | None:
        application = self._owned(user_id, application_id)
        return _to_record(ApplicationRecord, application) if application else None

    def update_fields(self, user_id: int, application_id: int, **values) -> ApplicationRecord | None:
        application = self._owned(user_id, application_id)
        if application is None:
            return None
        for key, value in values.items():
            setattr(application, key, value)
        self._commit()
        self.db.refresh(application)
        return _to_record(ApplicationRecord, application)

    def delete(self, user_id: int, application_id: int) -> bool:
        application = self._owned(user_id, application_id)
        if application is None:
            return False
        self.db.delete(application)
        self._commit()
        return True

    def list_for_user(
        self,
        user_id: int,
        *,
        status: str | None = None,
        platform: str | None = None,
        search: str | None = None,
        sort_by: str = "created_at",
        descending: bool = True,
        offset: int = 0,
        limit: int = 10,
    ) -> tuple[list[ApplicationRecord], int]:
        """Return one page of a user's applications and the unpaged total."""
        if sort_by not in self.SORTABLE:
            raise ValueError(f"Cannot sort by {sort_by!r}")

        query = self.db.query(JobApplication).filter(JobApplication.user_id == user_id)

        if status:
            query = query.filter(JobApplication.status == status)
        if platform:
            query = query.filter(func.lower(JobApplication.job_platform) == platform.lower())
        if search:
            search_term = f"%{_escape_like(search)}%"
            query = query.filter(
                or_(
                    JobApplication.job_title.ilike(search_term, escape="\\"),
                    JobApplication.company.ilike(search_term, escape="\\"),
                    JobApplication.job_platform.ilike(search_term, escape="\\"),
                )
            )

        total = query.count()

        column = getattr(JobApplication, sort_by)
        if descending:
            ordering = (column.desc(), JobApplication.id.desc())
        else:
            ordering = (column.asc(), JobApplication.id.asc())

        rows = query.order_by(*ordering).offset(offset).limit(limit).all()
        return [_to_record(ApplicationRecord, row) for row in rows], total
