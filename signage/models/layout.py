from datetime import datetime
from sqlalchemy import JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from signage.db import Base


class Layout(Base):
    __tablename__ = "layout"
    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey("customer.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    width = Column(Integer, nullable=False, default=1920)
    height = Column(Integer, nullable=False, default=1080)
    background_color = Column(String(20), nullable=False, default="#000000")
    thumbnail_url = Column(String(1024), nullable=True)
    tags = Column(String(500), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_by = Column(Integer, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    layers = relationship(
        "LayoutLayer",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="(LayoutLayer.z_index, LayoutLayer.id)",
    )


class LayoutLayer(Base):
    __tablename__ = "layout_layer"
    id = Column(Integer, primary_key=True, autoincrement=True)
    layout_id = Column(Integer, ForeignKey("layout.id", ondelete="CASCADE"), nullable=False, index=True)
    layer_name = Column(String(255), nullable=False)
    layer_type = Column(String(20), nullable=False)
    z_index = Column(Integer, nullable=False, default=0)
    position_x = Column(Integer, nullable=False, default=0)
    position_y = Column(Integer, nullable=False, default=0)
    width = Column(Integer, nullable=False)
    height = Column(Integer, nullable=False)
    rotation = Column(Float, nullable=False, default=0)
    opacity = Column(Float, nullable=False, default=1)
    is_visible = Column(Boolean, nullable=False, default=True)
    is_locked = Column(Boolean, nullable=False, default=False)
    # Shape depends on layer_type; validated at the API boundary.
    content_config = Column(JSON, nullable=True)
    style_config = Column(JSON, nullable=True)
    animation_config = Column(JSON, nullable=True)
    schedule_config = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
