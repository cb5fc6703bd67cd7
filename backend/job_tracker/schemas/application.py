from datetime import datetime

from pydantic import ConfigDict, Field

from job_tracker.schemas.user import CamelModel


class ApplicationBase(CamelModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    job_title: str = Field(min_length=1, max_length=255)
    company: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    date_applied: str = Field(min_length=1, max_length=50)
    status: str = Field(min_length=1, max_length=50)
    job_platform: str = Field(min_length=1, max_length=100)
    job_url: str = Field(min_length=1, max_length=1000)


class ApplicationCreate(ApplicationBase):
    pass


class ApplicationUpdate(CamelModel):
    """Partial update; omitted fields keep their stored values."""
    model_config = ConfigDict(str_strip_whitespace=True)

    job_title: str | None = Field(None, min_length=1, max_length=255)
    company: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, min_length=1)
    date_applied: str | None = Field(None, min_length=1, max_length=50)
    status: str | None = Field(None, min_length=1, max_length=50)
    job_platform: str | None = Field(None, min_length=1, max_length=100)
    job_url: str | None = Field(None, min_length=1, max_length=1000)


class ApplicationResponse(ApplicationBase):
    id: int
    user_id: int = Field(serialization_alias="user")
    resume_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ApplicationListResponse(CamelModel):
    applications: list[ApplicationResponse]
    total: int
    page: int
    limit: int
    has_next_page: bool
