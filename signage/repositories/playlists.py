from sqlalchemy.orm import Session

from signage.models.content import Content
from signage.models.playlist import Playlist, PlaylistItem


class PlaylistRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_items_with_content(self, playlist_id: int, customer_id: int) -> list[tuple[PlaylistItem, Content]]:
        return (
            self.db.query(PlaylistItem, Content)
            .join(Playlist, Playlist.id == PlaylistItem.playlist_id)
            .join(Content, Content.id == PlaylistItem.content_id)
            .filter(
                PlaylistItem.playlist_id == playlist_id,
                Playlist.customer_id == customer_id,
                Playlist.is_active.is_(True),
            )
            .order_by(PlaylistItem.display_order.asc(), PlaylistItem.id.asc())
            .all()
        )
