from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, text

from . import Base


class WorkSession(Base):
    __tablename__ = "work_sessions"
    __table_args__ = (
        # one clocked-in session per user
        Index(
            "uq_work_sessions_active_user",
            "user_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active"),
        ),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True)
    clock_in_time = Column(DateTime, nullable=False)
    clock_out_time = Column(DateTime, nullable=True)
    total_duration = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
