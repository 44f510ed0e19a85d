from datetime import datetime
from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String, Time
from sqlalchemy.orm import relationship
from signage.db import Base


class Schedule(Base):
    __tablename__ = "schedule"
    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey("customer.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    layout_id = Column(Integer, ForeignKey("layout.id", ondelete="CASCADE"), nullable=False)
    priority = Column(Integer, nullable=False, default=0)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    days_of_week = Column(String(50), nullable=True)  # CSV: Mon,Tue,Wed
    is_active = Column(Boolean, nullable=False, default=True)
    created_by = Column(Integer, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    assignments = relationship(
        "ScheduleAssignment",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ScheduleAssignment.id",
    )


class ScheduleAssignment(Base):
    __tablename__ = "schedule_assignment"
    id = Column(Integer, primary_key=True, autoincrement=True)
    schedule_id = Column(Integer, ForeignKey("schedule.id", ondelete="CASCADE"), nullable=False, index=True)
    assignment_type = Column(String(10), nullable=False)  # Customer, Site, Player
    target_customer_id = Column(Integer, ForeignKey("customer.id", ondelete="CASCADE"), nullable=True)
    target_site_id = Column(Integer, ForeignKey("site.id", ondelete="CASCADE"), nullable=True)
    target_player_id = Column(Integer, ForeignKey("player.id", ondelete="CASCADE"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
