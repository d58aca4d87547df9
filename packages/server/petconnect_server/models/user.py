"""Credential record behind an organization login."""

from sqlmodel import Field, SQLModel

from .base import CreatedAtMixin, UUIDMixin


class User(UUIDMixin, CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "users"

    email: str = Field(unique=True, index=True, nullable=False)
    password_hash: str = Field(nullable=False)  # bcrypt
