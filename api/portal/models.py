from sqlalchemy import Column, Integer, String, DateTime, BigInteger, Boolean, ForeignKey, Index, Text, func
from sqlalchemy.orm import relationship
from .db import Base

class User(Base):
    """
    Portal account, owned by the auth provider.

    Attributes:
        id (int): Primary key.
        email (str): Sign-in address, unique.
        password_hash (str): argon2 hash.
        is_active (bool): Disabled accounts cannot hold a session.
        email_confirmed_at (datetime): Set by the confirmation link; None until then.
        created_at (datetime): Timestamp of account creation.
    """
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    email_confirmed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    submissions = relationship("Submission", back_populates="owner", cascade="all, delete-orphan")


class Submission(Base):
    """
    One uploaded competition file.

    Attributes:
        id (int): Primary key.
        name (str): Original filename as chosen by the owner.
        size (int): Size in bytes.
        mime_type (str): Content type accepted at selection time.
        url (str): Public URL of the stored object.
        path (str): Storage key inside the bucket.
        user_id (int): Owner.
        created_at (datetime): Insert time; listings are ordered by it, newest first.
    """
    __tablename__ = "submissions"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    size = Column(BigInteger, nullable=False)
    mime_type = Column(String(128), nullable=False)
    url = Column(Text, nullable=False)
    path = Column(String(512), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    owner = relationship("User", back_populates="submissions")

    __table_args__ = (
        Index("ix_submissions_user_created", "user_id", "created_at"),
    )
