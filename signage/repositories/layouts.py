from sqlalchemy.orm import Session, selectinload

from signage.models.layout import Layout


class LayoutRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_with_layers(self, layout_id: int, customer_id: int) -> Layout | None:
        return (
            self.db.query(Layout)
            .options(selectinload(Layout.layers))
            .filter(Layout.id == layout_id, Layout.customer_id == customer_id)
            .first()
        )
