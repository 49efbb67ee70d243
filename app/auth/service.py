from datetime import UTC, datetime, timedelta

import bcrypt
from jose import jwt
from sqlmodel import Session, select

from app.db_models import User
from app.settings import settings


class EmailAlreadyRegistered(Exception):
    pass


class AuthService:
    """Authentication service for JWT and password operations."""

    def __init__(self, session: Session):
        self.session = session

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash."""
        try:
            return bcrypt.checkpw(
                plain_password.encode("utf-8"), hashed_password.encode("utf-8")
            )
        except ValueError:
            # Malformed stored hash
            return False

    @staticmethod
    def get_password_hash(password: str) -> str:
        """Generate password hash."""
        salt = bcrypt.gensalt(rounds=10)
        hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
        return hashed.decode("utf-8")

    def create_user(self, email: str, username: str, password: str) -> User:
        """Create a new user account."""
        email = email.lower()
        existing = self.session.exec(select(User).where(User.email == email)).first()
        if existing:
            raise EmailAlreadyRegistered(email)

        user = User(
            email=email,
            username=username,
            hashed_password=self.get_password_hash(password),
        )
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def authenticate_user(self, email: str, password: str) -> User | None:
        """Return the user for valid credentials, None otherwise."""
        user = self.session.exec(select(User).where(User.email == email.lower())).first()
        if not user or not self.verify_password(password, user.hashed_password):
            return None
        return user

    def create_access_token(
        self, data: dict, expires_delta: timedelta | None = None
    ) -> str:
        """Create JWT access token."""
        to_encode = data.copy()
        if expires_delta is None:
            expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        to_encode.update({"exp": datetime.now(UTC) + expires_delta})
        return jwt.encode(
            to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM
        )
