# Pydantic schemas for user-related requests/responses

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, field_validator


class UserRead(BaseModel):
    id: int
    nombre: str
    email: str
    tipo: str


class UserListItem(UserRead):
    fecha_registro: Optional[datetime] = None


class RegisterRequest(BaseModel):
    nombre: str
    email: EmailStr
    password: str
    codigoAdmin: Optional[str] = None

    @field_validator("nombre")
    @classmethod
    def _nombre(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        if not (v or "").strip():
            raise ValueError("field is required")
        return v


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email", "password")
    @classmethod
    def _required(cls, v: str) -> str:
        if not (v or "").strip():
            raise ValueError("field is required")
        return v
