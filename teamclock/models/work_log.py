from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, Text, text
from sqlalchemy.orm import relationship

from . import Base


class WorkLog(Base):
    __tablename__ = "work_logs"
    __table_args__ = (
        # one running timer per (ticket, user)
        Index(
            "uq_work_logs_open_timer",
            "ticket_id",
            "user_id",
            unique=True,
            postgresql_where=text("end_time IS NULL"),
            sqlite_where=text("end_time IS NULL"),
        ),
        Index("ix_work_logs_user_start", "user_id", "start_time"),
        CheckConstraint("duration IS NULL OR duration >= 0", name="ck_work_logs_duration_non_negative"),
    )

    id = Column(Integer, primary_key=True)
    ticket_id = Column(Integer, ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    work_session_id = Column(Integer, ForeignKey("work_sessions.id", ondelete="SET NULL"), nullable=True, index=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=True)
    duration = Column(Integer, nullable=True)
    description = Column(Text, nullable=True)

    ticket = relationship("Ticket", back_populates="work_logs")
