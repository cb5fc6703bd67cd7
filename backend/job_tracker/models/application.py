from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from job_tracker.database import Base


class JobApplication(Base):
    __tablename__ = "job_applications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    job_title = Column(String(255), nullable=False)
    company = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    date_applied = Column(String(50), nullable=False)
    status = Column(String(50), nullable=False)
    job_platform = Column(String(100), nullable=False)
    job_url = Column(String(1000), nullable=False)
    resume_url = Column(String(1000), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="applications")

    __table_args__ = (
        Index("ix_job_applications_user_created", "user_id", "created_at"),
        Index("ix_job_applications_user_status", "user_id", "status"),
    )
