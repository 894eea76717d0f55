"""
Preference and content filter database models.
"""

import uuid
from sqlalchemy import (
    Boolean,
    Column,
    Enum as SQLEnum,
    ForeignKey,
    JSON,
    String,
    Text,
    TIMESTAMP,
    Uuid,
)
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from domain.models.database import Base
from domain.enums import (
    AIModel,
    Language,
    PoliticalPerspective,
    PropagandaSensitivity,
    WritingTone,
)


def _enum_column_type(enum_cls, name: str, length: int = 50):
    """VARCHAR + CHECK constraint storing the enum's value, not its name."""
    return SQLEnum(
        enum_cls,
        name=name,
        native_enum=False,
        create_constraint=True,
        length=length,
        values_callable=lambda members: [m.value for m in members],
    )


# TEXT[] on PostgreSQL, JSON everywhere else (SQLite in tests)
StringList = ARRAY(Text).with_variant(JSON(), "sqlite")


class UserPreferences(Base):
    """Per-user article generation preferences"""

    __tablename__ = "user_preferences"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )
    perspective = Column(
        _enum_column_type(PoliticalPerspective, "political_perspective"),
        nullable=False,
        default=PoliticalPerspective.NEUTRAL,
    )
    tone = Column(
        _enum_column_type(WritingTone, "writing_tone"),
        nullable=False,
        default=WritingTone.PROFESSIONAL,
    )
    language = Column(
        _enum_column_type(Language, "language", length=10),
        nullable=False,
        default=Language.EN,
    )
    ai_model = Column(
        _enum_column_type(AIModel, "ai_model"),
        nullable=False,
        default=AIModel.OPENAI,
    )
    fact_checking_enabled = Column(Boolean, nullable=False, default=True)
    propaganda_detection_enabled = Column(Boolean, nullable=False, default=True)
    propaganda_sensitivity = Column(
        _enum_column_type(PropagandaSensitivity, "propaganda_sensitivity", length=20),
        nullable=False,
        default=PropagandaSensitivity.MEDIUM,
    )
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    user = relationship("AppUser", back_populates="preferences")
    content_filters = relationship(
        "ContentFilters",
        back_populates="preferences",
        uselist=False,
        cascade="all, delete-orphan",
    )


class ContentFilters(Base):
    """Topic, people and organization include/exclude lists for a user"""

    __tablename__ = "content_filters"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        String(64),
        ForeignKey("user_preferences.user_id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )
    included_topics = Column(StringList, nullable=False, default=list)
    excluded_topics = Column(StringList, nullable=False, default=list)
    included_people = Column(StringList, nullable=False, default=list)
    excluded_people = Column(StringList, nullable=False, default=list)
    included_organizations = Column(StringList, nullable=False, default=list)
    excluded_organizations = Column(StringList, nullable=False, default=list)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    preferences = relationship("UserPreferences", back_populates="content_filters")
