from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from . import Base

ticket_status_enum = Enum("open", "active", "close", name="ticket_status")
ticket_priority_enum = Enum("low", "medium", "high", "critical", name="ticket_priority")


class Ticket(Base):
    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(ticket_status_enum, nullable=False, default="open")
    priority = Column(ticket_priority_enum, nullable=False, default="medium")
    assigned_to_user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    total_duration = Column(Integer, nullable=False, default=0)
    last_worked_on = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    project = relationship("Project", back_populates="tickets")
    work_logs = relationship("WorkLog", back_populates="ticket", order_by="WorkLog.start_time.desc()")
