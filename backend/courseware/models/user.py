"""User model and the anonymous Guest actor."""

from sqlalchemy import Column, String, Text, DateTime, Boolean, Integer
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class User(Base):
    """Registered user. Administrators bypass exercise gating."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    login = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(Text, nullable=False, default="")
    password_hash = Column(Text)
    administrator = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    submissions = relationship(
        "Submission", back_populates="user",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    awarded_points = relationship(
        "AwardedPoint", back_populates="user",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    reviews_given = relationship("Review", back_populates="reviewer", passive_deletes=True)

    def __repr__(self):
        return f"<User(id={self.id}, login='{self.login}')>"

    @property
    def is_administrator(self) -> bool:
        return bool(self.administrator)

    @property
    def is_guest(self) -> bool:
        return False


class Guest:
    """A visitor who has not logged in. Never persisted."""

    id = None
    login = "guest"
    administrator = False

    def __repr__(self):
        return "<Guest>"

    @property
    def is_administrator(self) -> bool:
        return False

    @property
    def is_guest(self) -> bool:
        return True
