"""SQLAlchemy model for user profiles."""

from sqlalchemy import Column, Integer, String

from app.infrastructure.database import Base


class ProfileModel(Base):
    """Contact information for a user, owned by the accounts workflow."""

    __tablename__ = "profile"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, unique=True, index=True)
    email = Column(String(120), nullable=True)
    first_name = Column(String(80), nullable=True)
    last_name = Column(String(80), nullable=True)


__all__ = ["ProfileModel"]
