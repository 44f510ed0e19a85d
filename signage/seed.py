import base64
import hashlib
import logging
import os
from datetime import time
from sqlalchemy.orm import Session
from signage.db import SessionLocal, init_db
from signage.models.content import Content
from signage.models.customer import Customer, Site
from signage.models.layout import Layout, LayoutLayer
from signage.models.player import Player
from signage.models.playlist import Playlist, PlaylistItem
from signage.models.schedule import Schedule, ScheduleAssignment
from signage.models.user import User
from signage.services.auth import generate_activation_code, hash_password
from signage.services.storage import CONTENT_DIR

logger = logging.getLogger(__name__)

DEMO_SUBDOMAIN = "demo"
DEMO_ADMIN_EMAIL = "admin@demo.local"
DEMO_ADMIN_PASSWORD = os.getenv("SIGNAGE_SEED_ADMIN_PASSWORD", "changeme123")


def seed() -> None:
    init_db()
    db: Session = SessionLocal()
    try:
        if db.query(Customer).filter(Customer.subdomain == DEMO_SUBDOMAIN).first():
            logger.info("Demo customer already exists, nothing to seed")
            return

        customer = Customer(name="Demo Retail", subdomain=DEMO_SUBDOMAIN, contact_email=DEMO_ADMIN_EMAIL)
        db.add(customer)
        db.commit()
        db.refresh(customer)

        admin = User(
            customer_id=customer.id,
            email=DEMO_ADMIN_EMAIL,
            password_hash=hash_password(DEMO_ADMIN_PASSWORD),
            first_name="Demo",
            last_name="Admin",
            role="Admin",
        )
        site = Site(customer_id=customer.id, name="Main Store", site_code="MAIN", time_zone="UTC")
        db.add(admin)
        db.add(site)
        db.commit()
        db.refresh(site)

        code, expires_at = generate_activation_code()
        player = Player(
            site_id=site.id,
            customer_id=customer.id,
            name="Entrance Screen",
            player_code="MAIN-ENTRANCE",
            activation_code=code,
            activation_code_expires_at=expires_at,
        )
        db.add(player)
        db.commit()

        png_bytes = base64.b64decode(
            "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR4nGNgYAAAAAMAASsJTYQAAAAASUVORK5CYII="
        )
        folder = os.path.join(CONTENT_DIR, str(customer.id))
        os.makedirs(folder, exist_ok=True)
        contents = []
        for filename, label in [("welcome.png", "Welcome Slide"), ("promo.png", "Promo Slide")]:
            with open(os.path.join(folder, filename), "wb") as f:
                f.write(png_bytes)
            content = Content(
                customer_id=customer.id,
                name=label,
                content_type="Image",
                file_url=f"/storage/content/{customer.id}/{filename}",
                file_size=len(png_bytes),
                checksum=hashlib.sha256(png_bytes).hexdigest(),
                mime_type="image/png",
                duration=10,
            )
            db.add(content)
            contents.append(content)
        db.commit()

        playlist = Playlist(customer_id=customer.id, name="Default Loop")
        for order, content in enumerate(contents):
            playlist.items.append(
                PlaylistItem(content_id=content.id, display_order=order, duration=10, transition_type="Fade")
            )
        db.add(playlist)
        db.commit()

        layout = Layout(customer_id=customer.id, name="Fullscreen Loop")
        layout.layers.append(
            LayoutLayer(
                layer_name="Main",
                layer_type="playlist",
                width=1920,
                height=1080,
                content_config={"playlistId": playlist.id},
            )
        )
        db.add(layout)
        db.commit()

        schedule = Schedule(
            customer_id=customer.id,
            name="Opening Hours",
            layout_id=layout.id,
            priority=10,
            start_time=time(8, 0, 0),
            end_time=time(22, 0, 0),
            days_of_week="Mon,Tue,Wed,Thu,Fri,Sat",
        )
        schedule.assignments.append(ScheduleAssignment(assignment_type="Site", target_site_id=site.id))
        db.add(schedule)
        db.commit()
        logger.info("Seeded demo customer %s; player activation code %s", customer.id, code)
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    seed()
