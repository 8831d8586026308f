from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from student_records.models.student import District, Student
from student_records.utils.tz import iso_utc


class _Wire(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NameOut(_Wire):
    first: str
    middle: str | None = None
    last: str


class AddressOut(_Wire):
    line1: str
    line2: str | None = None
    city: str
    district: District


class StudentOut(_Wire):
    id: str
    code: str
    name: NameOut
    birth_date: str
    address: AddressOut
    contact_number: str
    email: str | None = None
    deleted_at: str | None = None
    created_at: str
    updated_at: str

    @classmethod
    def from_model(cls, st: Student) -> StudentOut:
        return cls(
            id=st.id,
            code=st.code,
            name=NameOut(first=st.first_name, middle=st.middle_name, last=st.last_name),
            birth_date=iso_utc(st.birth_date),
            address=AddressOut(
                line1=st.address_line1,
                line2=st.address_line2,
                city=st.city,
                district=st.district,
            ),
            contact_number=st.contact_number,
            email=st.email,
            deleted_at=iso_utc(st.deleted_at) if st.deleted_at else None,
            created_at=iso_utc(st.created_at),
            updated_at=iso_utc(st.updated_at),
        )

    def to_wire(self) -> dict[str, Any]:
        # opcionais ausentes são omitidos; deletedAt sempre presente
        data = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        data["deletedAt"] = self.deleted_at
        return data


def serialize_student(st: Student) -> dict[str, Any]:
    return StudentOut.from_model(st).to_wire()
