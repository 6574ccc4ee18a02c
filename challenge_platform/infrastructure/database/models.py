"""SQLAlchemy ORM models for the platform database."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from challenge_platform.shared.utils.datetime_utils import utcnow


class Base(DeclarativeBase):
    """Base class for all ORM models."""


# ===========================================
# USERS
# ===========================================


class User(Base):
    """Platform user. Owned by the authentication service; read here for display names."""

    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True, default=uuid4)
    username: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


# ===========================================
# CHALLENGE AGGREGATE
# ===========================================


class Challenge(Base):
    """Challenge aggregate root.

    Participations and completions are child rows owned by the challenge.
    They are only ever written through the conditional statements in
    ``ChallengeRepository``.
    """

    __tablename__ = "challenges"

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True, default=uuid4)
    url_name: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    author_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    date_created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    # Relationships
    author: Mapped["User"] = relationship(lazy="raise")
    participations: Mapped[list["ChallengeParticipation"]] = relationship(
        back_populates="challenge",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ChallengeParticipation.id",
        lazy="raise",
    )
    completions: Mapped[list["ChallengeCompletion"]] = relationship(
        back_populates="challenge",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ChallengeCompletion.id",
        lazy="raise",
    )

    __table_args__ = (
        UniqueConstraint("url_name", name="uq_challenges_url_name"),
        CheckConstraint("views >= 0", name="non_negative_views"),
        Index("idx_challenges_date_created", "date_created"),
        Index("idx_challenges_author", "author_id"),
    )


class ChallengeParticipation(Base):
    """A user's participation record in a challenge.

    The serial primary key preserves insertion order.
    """

    __tablename__ = "challenge_participations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    challenge_id: Mapped[UUID] = mapped_column(
        ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )

    challenge: Mapped["Challenge"] = relationship(back_populates="participations")
    user: Mapped["User"] = relationship(lazy="raise")

    __table_args__ = (
        UniqueConstraint("challenge_id", "user_id", name="uq_participations_challenge_user"),
        Index("idx_participations_user", "user_id"),
    )


class ChallengeCompletion(Base):
    """Membership of a user in a challenge's ``completed_by`` set.

    Rows are never deleted while the challenge exists.
    """

    __tablename__ = "challenge_completions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    challenge_id: Mapped[UUID] = mapped_column(
        ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )

    challenge: Mapped["Challenge"] = relationship(back_populates="completions")
    user: Mapped["User"] = relationship(lazy="raise")

    __table_args__ = (
        UniqueConstraint("challenge_id", "user_id", name="uq_completions_challenge_user"),
        Index("idx_completions_user", "user_id"),
    )
