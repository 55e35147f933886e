from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .database import Base


class CigarRecord(Base):
    """Accumulated recognition statistics for one normalized cigar key."""

    __tablename__ = "cigar_records"
    __table_args__ = {'extend_existing': True}

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    product_name: Mapped[str] = mapped_column(String(512), nullable=False)
    total_recognitions: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    rating_sum: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")
    rating_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    confidence_sum: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")
    confidence_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description_confidence: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    description_updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    last_recognized_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    counters: Mapped[List["FieldCounter"]] = relationship(
        "FieldCounter", back_populates="record", cascade="all, delete-orphan"
    )
    contributors: Mapped[List["RecordContributor"]] = relationship(
        "RecordContributor", back_populates="record", cascade="all, delete-orphan"
    )


class FieldCounter(Base):
    __tablename__ = "field_counters"
    __table_args__ = (
        UniqueConstraint("record_key", "field", "value", name="uq_field_counters_value"),
        {'extend_existing': True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    record_key: Mapped[str] = mapped_column(ForeignKey("cigar_records.key"), nullable=False)
    field: Mapped[str] = mapped_column(String(64), nullable=False)
    value: Mapped[str] = mapped_column(String(255), nullable=False)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    record: Mapped["CigarRecord"] = relationship(CigarRecord, back_populates="counters")


class RecordContributor(Base):
    __tablename__ = "record_contributors"
    __table_args__ = (
        UniqueConstraint("record_key", "contributor_id", name="uq_record_contributors_id"),
        Index("idx_record_contributors_contributor_id", "contributor_id"),
        {'extend_existing': True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    record_key: Mapped[str] = mapped_column(ForeignKey("cigar_records.key"), nullable=False)
    contributor_id: Mapped[str] = mapped_column(String(255), nullable=False)
    contributor_name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    record: Mapped["CigarRecord"] = relationship(CigarRecord, back_populates="contributors")
