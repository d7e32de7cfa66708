"""
User and site membership models.

Users authenticate elsewhere; this service only reads their system role and
per-site roles to answer scope checks.
"""

import uuid
from enum import Enum
from typing import List

from sqlalchemy import Boolean, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pubflow.kernel.models.base import Base, TimestampMixin, generate_uuid


class SystemRole(str, Enum):
    """Platform wide roles."""
    ADMIN = "admin"
    SERVICE = "service"
    USER = "user"


class SiteRoleName(str, Enum):
    """Roles a user can hold on a single site."""
    ADMIN = "admin"
    EDITOR = "editor"
    SUBMITTER = "submitter"
    REVIEWER = "reviewer"
    PUBLIC = "public"


class User(Base, TimestampMixin):
    """User account model."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    full_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="",
    )
    system_role: Mapped[SystemRole] = mapped_column(
        String(50),
        default=SystemRole.USER,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    # Loaded eagerly: scope checks run synchronously over these
    site_roles: Mapped[List["SiteRole"]] = relationship(
        "SiteRole",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<User {self.email}>"


class SiteRole(Base, TimestampMixin):
    """A user's role on one site."""

    __tablename__ = "site_roles"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    site_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )
    role: Mapped[SiteRoleName] = mapped_column(
        String(50),
        nullable=False,
    )

    user: Mapped["User"] = relationship("User", back_populates="site_roles")

    __table_args__ = (
        UniqueConstraint("user_id", "site_name", "role", name="uq_site_roles_user_site_role"),
    )

    def __repr__(self) -> str:
        return f"<SiteRole {self.site_name}:{self.role}>"
