"""ORM model for issued refresh tokens, keyed by the token string itself."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text, func
from sqlalchemy.orm import relationship

from app.models.base import Base


class RefreshToken(Base):
    """
    A refresh token is honoured only while its row exists: deleting the row
    revokes the token even if its signature and expiry are still valid.
    """

    __tablename__ = "refresh_tokens"

    token = Column(Text, primary_key=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    user = relationship("User", back_populates="refresh_tokens")
