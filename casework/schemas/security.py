from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class OfficeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    code: str


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    email: str
    role: str
    office_id: int | None
    department: str | None
    is_active: bool


class RoleOut(BaseModel):
    key: str
    level: int
    behavior: str
    english_name: str
    spanish_name: str
    department: str
    description: str


class AccessOut(BaseModel):
    callerRole: str
    officeScope: int | None
    departmentScope: str | None
    assignedToScope: int | None
