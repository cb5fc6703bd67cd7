from job_tracker.models.user import User
from job_tracker.models.application import JobApplication

__all__ = ["User", "JobApplication"]
