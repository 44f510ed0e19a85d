from datetime import datetime
from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, String, Text
from signage.db import Base


class Content(Base):
    __tablename__ = "content"
    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey("customer.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    content_type = Column(String(20), nullable=False)  # Image, Video, HTML, URL, PDF
    file_url = Column(String(1024), nullable=True)
    thumbnail_url = Column(String(1024), nullable=True)
    file_size = Column(BigInteger, nullable=True)
    duration = Column(Integer, nullable=True)
    width = Column(Integer, nullable=True)
    height = Column(Integer, nullable=True)
    mime_type = Column(String(100), nullable=True)
    checksum = Column(String(64), nullable=True)
    status = Column(String(20), nullable=False, default="Ready")
    tags = Column(String(500), nullable=True)
    uploaded_by = Column(Integer, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
