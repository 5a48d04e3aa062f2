from pydantic import BaseModel, EmailStr, Field


class RegisterSchema(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    phone: str | None = None
    password: str = Field(min_length=6)


class ProfileOut(BaseModel):
    id: int
    name: str | None = None
    email: EmailStr
    phone: str | None = None
    role: str
    isAdmin: bool
