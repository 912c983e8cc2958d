"""
Schémas d'authentification / Authentication schemas.
Inscription, connexion, profil.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationInfo, field_validator

from carrental.models.user import Role


class RegisterRequest(BaseModel):
    """Requête d'inscription / Registration request."""
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    country: str = Field(min_length=1, max_length=255)
    city: str = Field(min_length=1, max_length=255)
    job: str = Field(min_length=1, max_length=255)
    description: str | None = None
    role: Role
    password: str = Field(min_length=8, max_length=200)
    password_confirmation: str

    @field_validator("password_confirmation")
    @classmethod
    def _passwords_match(cls, value: str, info: ValidationInfo) -> str:
        if "password" in info.data and value != info.data["password"]:
            raise ValueError("The password confirmation does not match.")
        return value


class LoginRequest(BaseModel):
    """Requête de connexion / Login request."""
    email: EmailStr
    password: str = Field(min_length=6, max_length=200)


class UserProfile(BaseModel):
    id: int
    name: str
    email: str
    country: str
    city: str
    job: str
    description: str | None
    role: Role
    role_name: str
    model_config = ConfigDict(from_attributes=True)


class TokenData(BaseModel):
    """Profil + jeton / Profile + token."""
    user: UserProfile
    token: str
    token_type: str = "Bearer"
