from __future__ import annotations

import datetime as dt
import enum
import uuid

from sqlalchemy import DateTime, Enum, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from student_records.db.base_class import Base


class District(str, enum.Enum):
    CENTRAL = "Central"
    NORTH = "North"
    SOUTH = "South"
    EAST = "East"
    WEST = "West"
    NORTH_EAST = "North East"
    NORTH_WEST = "North West"
    SOUTH_EAST = "South East"
    SOUTH_WEST = "South West"
    COASTAL = "Coastal"


DISTRICTS: tuple[str, ...] = tuple(d.value for d in District)


def _utcnow() -> dt.datetime:
    return dt.datetime.now(tz=dt.UTC)


class Student(Base):
    __tablename__ = "students"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    code: Mapped[str] = mapped_column(String(20), nullable=False)

    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    middle_name: Mapped[str | None] = mapped_column(String(50))
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)

    birth_date: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    address_line1: Mapped[str] = mapped_column(String(200), nullable=False)
    address_line2: Mapped[str | None] = mapped_column(String(100))
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    district: Mapped[District] = mapped_column(
        Enum(
            District,
            name="district_enum",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )

    contact_number: Mapped[str] = mapped_column(String(10), nullable=False)
    # NULLs never collide under UNIQUE, which gives sparse uniqueness
    email: Mapped[str | None] = mapped_column(String(254))

    deleted_at: Mapped[dt.datetime | None] = mapped_column(
        DateTime(timezone=True), default=None
    )
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    __table_args__ = (
        UniqueConstraint("code", name="uq_students_code"),
        UniqueConstraint("email", name="uq_students_email"),
        Index("ix_students_district", "district"),
        Index("ix_students_deleted_at", "deleted_at"),
        Index("ix_students_created_at", "created_at"),
    )


# dotted wire path -> column attribute
FIELD_COLUMNS: dict[str, str] = {
    "name.first": "first_name",
    "name.middle": "middle_name",
    "name.last": "last_name",
    "birthDate": "birth_date",
    "address.line1": "address_line1",
    "address.line2": "address_line2",
    "address.city": "city",
    "address.district": "district",
    "contactNumber": "contact_number",
    "email": "email",
}
