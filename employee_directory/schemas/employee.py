from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_serializer

# 문자열 필드 (sanitize 대상)
TEXT_FIELDS = ("name", "email", "department", "position")


class EmployeeCreate(BaseModel):
    """POST /api/employees 요청 바디

    길이/형식 제약은 여기서 걸지 않고 core.validation 규칙 테이블에서 검사한다.
    여기서는 JSON 타입만 확인 (id, password_hash 등 정의되지 않은 필드는 무시).
    """
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    email: Optional[str] = None
    department: str = ""
    position: str = ""
    salary: Decimal = Decimal("0")


class EmployeeUpdate(BaseModel):
    """PUT /api/employees/{id} 요청 바디

    빠졌거나 null인 필드는 기존 값을 유지한다.
    """
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    email: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    salary: Optional[Decimal] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_none=True)


class Employee(BaseModel):
    """응답용 스키마 (password_hash, deleted_at 없음)"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    department: str
    position: str
    salary: Decimal
    created_at: datetime
    updated_at: datetime

    @field_serializer("salary")
    def serialize_salary(self, salary: Decimal) -> float:
        return float(salary)
