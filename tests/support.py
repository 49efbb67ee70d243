import os
import tempfile

os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-long-enough-1234567890")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "squads-test-logs"))
os.environ.setdefault("LOG_LEVEL", "WARNING")

from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session  # noqa: E402

from app.db_models import Player, Role, User  # noqa: E402
from app.utils.db import build_engine, create_db_and_tables  # noqa: E402


def make_engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    create_db_and_tables(engine)
    return engine


def make_user(session: Session, email: str = "coach@example.com") -> User:
    user = User(email=email, username=email.split("@")[0], hashed_password="x")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def make_player(
    session: Session,
    position: Role,
    name: str = "Test Player",
    rarity: int = 3,
    base_overall: int = 70,
) -> Player:
    player = Player(
        name=name,
        position=position,
        rarity=rarity,
        base_overall=base_overall,
        tier=1,
        pace=60,
        shooting=61,
        passing=62,
        dribbling=63,
        defending=64,
        physical=65,
    )
    session.add(player)
    session.commit()
    session.refresh(player)
    return player
