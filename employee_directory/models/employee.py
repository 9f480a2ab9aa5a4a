from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
)

from employee_directory.core.db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Employee(Base):
    __tablename__ = "employees"

    # SQLite는 INTEGER PRIMARY KEY만 자동 증가
    id = Column(
        BigInteger().with_variant(Integer(), "sqlite"),
        primary_key=True,
        index=True,
        autoincrement=True,
    )
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    department = Column(String(100), nullable=False, default="")
    position = Column(String(100), nullable=False, default="")
    salary = Column(Numeric(10, 2), nullable=False, default=0)
    # 응답 스키마에는 절대 포함하지 않음
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    # NULL이면 활성 레코드 (soft delete)
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)

    __table_args__ = (
        CheckConstraint("salary >= 0", name="ck_employees_salary_non_negative"),
        # 삭제되지 않은 레코드끼리만 email 유니크
        Index(
            "uq_employees_email_active",
            "email",
            unique=True,
            postgresql_where=deleted_at.is_(None),
            sqlite_where=deleted_at.is_(None),
        ),
    )
