from datetime import datetime
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer
from signage.db import Base


class ProofOfPlay(Base):
    __tablename__ = "proof_of_play"
    id = Column(Integer, primary_key=True, autoincrement=True)
    player_id = Column(Integer, ForeignKey("player.id", ondelete="CASCADE"), nullable=False, index=True)
    layout_id = Column(Integer, ForeignKey("layout.id", ondelete="SET NULL"), nullable=True)
    playlist_id = Column(Integer, ForeignKey("playlist.id", ondelete="SET NULL"), nullable=True)
    schedule_id = Column(Integer, ForeignKey("schedule.id", ondelete="SET NULL"), nullable=True)
    content_id = Column(Integer, ForeignKey("content.id", ondelete="SET NULL"), nullable=True)
    playback_start_time = Column(DateTime, nullable=False, index=True)
    playback_end_time = Column(DateTime, nullable=True)
    duration = Column(Integer, nullable=True)
    is_completed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
