import logging

from sqlalchemy.orm import Session

from . import models
from .deps import get_password_hash

logger = logging.getLogger(__name__)

DEFAULT_RUNNING_TEXT = "Selamat Datang di RoomBook - Sistem Manajemen Ruang Meeting Modern"

DEMO_ROOMS = [
    {
        "name": "Conference Room A",
        "capacity": 12,
        "description": "Large conference room with projector and whiteboard.",
        "image_url": "https://images.unsplash.com/photo-1497366216548-37526070297c?auto=format&fit=crop&q=80&w=1000",
        "equipment": "Projector, Whiteboard, Video Conf",
    },
    {
        "name": "Meeting Room B",
        "capacity": 6,
        "description": "Small meeting room for quick syncs.",
        "image_url": "https://images.unsplash.com/photo-1517502884422-41e157d44301?auto=format&fit=crop&q=80&w=1000",
        "equipment": "TV, Whiteboard",
    },
    {
        "name": "Focus Pod 1",
        "capacity": 1,
        "description": "Soundproof pod for individual work.",
        "image_url": "https://images.unsplash.com/photo-1519389950473-47ba0277781c?auto=format&fit=crop&q=80&w=1000",
        "equipment": "Desk, Chair, Power Outlet",
    },
    {
        "name": "Creative Lab",
        "capacity": 8,
        "description": "Open space with bean bags and creative tools.",
        "image_url": "https://images.unsplash.com/photo-1522071820081-009f0129c71c?auto=format&fit=crop&q=80&w=1000",
        "equipment": "Whiteboard, Bean Bags, TV",
    },
]

DEMO_USERS = [
    ("superadmin", "super123", models.UserRole.super_admin),
    ("admin", "admin123", models.UserRole.admin),
    ("user", "user123", models.UserRole.user),
    ("viewer", "viewer123", models.UserRole.viewer),
]

DEMO_ADS = [
    "https://images.unsplash.com/photo-1542744173-8e7e53415bb0?auto=format&fit=crop&q=80&w=1000",
    "https://images.unsplash.com/photo-1557804506-669a67965ba0?auto=format&fit=crop&q=80&w=1000",
]


def seed_running_text(db: Session) -> None:
    if db.get(models.Setting, models.RUNNING_TEXT_KEY) is None:
        db.add(models.Setting(key=models.RUNNING_TEXT_KEY, value=DEFAULT_RUNNING_TEXT))


def seed_rooms(db: Session) -> None:
    if db.query(models.Room).count() == 0:
        db.add_all(models.Room(**room) for room in DEMO_ROOMS)
        logger.info("Seeded %d demo rooms", len(DEMO_ROOMS))


def seed_users(db: Session) -> None:
    if db.query(models.User).count() == 0:
        for username, password, role in DEMO_USERS:
            db.add(
                models.User(
                    username=username,
                    hashed_password=get_password_hash(password),
                    role=role,
                )
            )
        logger.info("Seeded %d demo users", len(DEMO_USERS))
        return

    # existing databases must always keep a super admin account
    has_super_admin = (
        db.query(models.User)
        .filter(models.User.role == models.UserRole.super_admin)
        .first()
    )
    if not has_super_admin and not db.query(models.User).filter(
        models.User.username == "superadmin"
    ).first():
        username, password, role = DEMO_USERS[0]
        db.add(
            models.User(
                username=username,
                hashed_password=get_password_hash(password),
                role=role,
            )
        )
        logger.warning("No super admin found, recreated account %r", username)


def seed_ads(db: Session) -> None:
    if db.query(models.Ad).count() == 0:
        db.add_all(
            models.Ad(type=models.AdType.image, url=url, duration=10) for url in DEMO_ADS
        )


def seed_demo_data(db: Session) -> None:
    """Fill empty tables with demo rooms, users, ads and the running text."""
    seed_running_text(db)
    seed_rooms(db)
    seed_users(db)
    seed_ads(db)
    db.commit()
