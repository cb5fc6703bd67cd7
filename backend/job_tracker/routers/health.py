import logging
import os

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from job_tracker.database import get_db
from job_tracker.dependencies import get_resume_storage
from job_tracker.services.storage import LocalResumeStorage

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/health")
def health_check(
    db: Session = Depends(get_db),
    storage: LocalResumeStorage = Depends(get_resume_storage),
):
    """Report database connectivity and whether resumes can be written.

    Sync on purpose: SQLAlchemy here is synchronous, so FastAPI runs this in
    its threadpool.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except Exception as e:
        logger.warning("Health check database probe failed: %s", e)
        db_status = f"unhealthy: {str(e)}"

    upload_dir = storage.upload_dir
    if upload_dir.is_dir() and os.access(upload_dir, os.W_OK):
        storage_status = "healthy"
    else:
        storage_status = f"unhealthy: {upload_dir} is not writable"

    healthy = db_status == "healthy" and storage_status == "healthy"
    return {
        "status": "ok" if healthy else "degraded",
        "database": db_status,
        "storage": storage_status,
    }
