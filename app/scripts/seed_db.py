from __future__ import annotations

import random

from faker import Faker
from sqlmodel import Session, select

from app.auth.service import AuthService
from app.db_models import Player, Role, User, UserInventory
from app.logger import logger
from app.utils.db import create_db_and_tables, engine

fake = Faker()
random.seed(42)
Faker.seed(42)

DEMO_EMAIL = "demo@squads.dev"
DEMO_PASSWORD = "demo-password"

# Catalog share per role; utility players are rare wildcards
ROLE_WEIGHTS = {
    Role.GOALKEEPER: 3,
    Role.DEFENDER: 8,
    Role.MIDFIELDER: 8,
    Role.FORWARD: 6,
    Role.UTILITY: 1,
}

# Skills a role leans on, boosted on generation
ROLE_STRENGTHS = {
    Role.GOALKEEPER: ("defending", "physical"),
    Role.DEFENDER: ("defending", "physical"),
    Role.MIDFIELDER: ("passing", "dribbling"),
    Role.FORWARD: ("shooting", "pace"),
    Role.UTILITY: (),
}


def _skill(base: int, boosted: bool) -> int:
    value = base + random.randint(-12, 8) + (10 if boosted else 0)
    return max(1, min(100, value))


def seed_players(session: Session, count: int = 120) -> list[Player]:
    existing = session.exec(select(Player)).all()
    if existing:
        return existing

    roles = list(ROLE_WEIGHTS)
    weights = list(ROLE_WEIGHTS.values())
    players: list[Player] = []
    for _ in range(count):
        role = random.choices(roles, weights=weights)[0]
        rarity = random.choices([1, 2, 3, 4, 5], weights=[40, 30, 18, 9, 3])[0]
        base_overall = min(99, 40 + rarity * 8 + random.randint(0, 12))
        strengths = ROLE_STRENGTHS[role]
        players.append(
            Player(
                name=fake.name(),
                position=role,
                rarity=rarity,
                base_overall=base_overall,
                tier=random.randint(0, 2),
                **{
                    skill: _skill(base_overall, skill in strengths)
                    for skill in ("pace", "shooting", "passing", "dribbling", "defending", "physical")
                },
            )
        )
    session.add_all(players)
    # Don't commit here - let the main function handle it
    return players


def seed_demo_user(session: Session) -> User:
    user = session.exec(select(User).where(User.email == DEMO_EMAIL)).first()
    if user:
        return user
    user = User(
        email=DEMO_EMAIL,
        username="demo",
        hashed_password=AuthService.get_password_hash(DEMO_PASSWORD),
    )
    session.add(user)
    return user


def seed_inventory(session: Session, user: User, players: list[Player], per_role: int = 6) -> None:
    existing = session.exec(
        select(UserInventory).where(UserInventory.user_id == user.id)
    ).first()
    if existing:
        return
    by_role: dict[Role, list[Player]] = {}
    for p in players:
        by_role.setdefault(Role(p.position), []).append(p)
    for role_players in by_role.values():
        for p in role_players[:per_role]:
            session.add(UserInventory(user_id=user.id, player_id=p.id))


def main() -> None:
    create_db_and_tables()
    with Session(engine) as session:
        players = seed_players(session)
        user = seed_demo_user(session)
        session.flush()
        seed_inventory(session, user, players)
        session.commit()
    logger.info(f"Seeded {len(players)} players and demo user {DEMO_EMAIL}")


if __name__ == "__main__":
    main()
