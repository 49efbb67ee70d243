from pydantic import BaseModel, EmailStr, Field, field_validator

from app.settings import settings


class UserSignUp(BaseModel):
    email: EmailStr
    username: str = Field(min_length=3, max_length=50)
    password: str

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v) < settings.PASSWORD_MIN_LENGTH:
            raise ValueError(
                f"password must be at least {settings.PASSWORD_MIN_LENGTH} characters"
            )
        return v


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class Token(BaseModel):
    """Payload returned by a successful login."""

    access_token: str
    token_type: str = "bearer"
    user_id: str
