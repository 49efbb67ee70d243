from dataclasses import dataclass
from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlmodel import Session

from app.db_models import User
from app.settings import settings
from app.utils.db import get_session

security = HTTPBearer()


@dataclass
class AuthUser:
    id: UUID
    email: str


def _credentials_error(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


class AuthDependency:
    @staticmethod
    def get_current_user(
        request: Request,
        credentials: HTTPAuthorizationCredentials = Depends(security),
        session: Session = Depends(get_session),
    ) -> AuthUser:
        """
        Dependency to get the current authenticated user from the JWT token
        """
        try:
            payload = jwt.decode(
                credentials.credentials,
                settings.SECRET_KEY,
                algorithms=[settings.JWT_ALGORITHM],
            )
        except JWTError as err:
            raise _credentials_error() from err

        subject = payload.get("sub")
        if subject is None:
            raise _credentials_error()
        try:
            user_id = UUID(str(subject))
        except ValueError as err:
            raise _credentials_error() from err

        user = session.get(User, user_id)
        if not user:
            raise _credentials_error("User not found")

        auth_user = AuthUser(id=user.id, email=user.email)
        request.state.user = auth_user
        return auth_user


# Common dependencies
get_current_user = AuthDependency.get_current_user

# Type hints for dependency injection
CurrentUser = Annotated[AuthUser, Depends(get_current_user)]
