from datetime import datetime
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from signage.db import Base


class Player(Base):
    __tablename__ = "player"
    id = Column(Integer, primary_key=True, autoincrement=True)
    site_id = Column(Integer, ForeignKey("site.id", ondelete="CASCADE"), nullable=False, index=True)
    # Denormalised from the site so customer-scoped lookups need no join.
    customer_id = Column(Integer, ForeignKey("customer.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    player_code = Column(String(50), nullable=False, unique=True)
    mac_address = Column(String(20), nullable=True)
    serial_number = Column(String(100), nullable=True)
    location = Column(String(200), nullable=True)
    screen_resolution = Column(String(20), nullable=True)
    orientation = Column(String(20), nullable=False, default="Landscape")
    status = Column(String(20), nullable=False, default="Offline")
    last_heartbeat = Column(DateTime, nullable=True)
    ip_address = Column(String(50), nullable=True)
    player_version = Column(String(50), nullable=True)
    os_version = Column(String(50), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    activation_code = Column(String(20), nullable=True)
    activation_code_expires_at = Column(DateTime, nullable=True)
    activated_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class PlayerToken(Base):
    __tablename__ = "player_token"
    id = Column(Integer, primary_key=True, autoincrement=True)
    player_id = Column(Integer, ForeignKey("player.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(String(1024), nullable=False, unique=True)
    expires_at = Column(DateTime, nullable=False)
    revoked_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
