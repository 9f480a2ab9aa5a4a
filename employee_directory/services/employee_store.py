"""
Employee 저장소 어댑터.

CRUD/검색 요청을 SQLAlchemy 쿼리로 변환한다.
- 모든 조회/수정/삭제는 deleted_at IS NULL 인 활성 레코드만 대상
- 검색어는 항상 바인딩 파라미터로 전달 (문자열 결합 금지)
- DB 예외는 StoreError 계열로 변환해서 올린다 (조용히 무시하지 않음)
"""

import logging
from typing import Any, List, Mapping, Optional

from sqlalchemy import or_, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from employee_directory.core.exceptions import (
    DuplicateKeyError,
    NotFoundError,
    StoreError,
)
from employee_directory.models.employee import Employee, utcnow

logger = logging.getLogger(__name__)

# update로 바꿀 수 있는 컬럼
UPDATABLE_FIELDS = ("name", "email", "department", "position", "salary")


class EmployeeStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def ping(self) -> None:
        try:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise StoreError("Database is unreachable") from exc

    async def create(self, fields: Mapping[str, Any]) -> Employee:
        employee = Employee(**fields)
        async with self._session_factory() as session:
            try:
                if await self._email_taken(session, employee.email):
                    raise DuplicateKeyError("email already in use")

                session.add(employee)
                await session.commit()
                await session.refresh(employee)
            except IntegrityError as exc:
                # 동시 생성 경쟁: 유니크 인덱스 위반도 같은 DuplicateKeyError로 처리
                await session.rollback()
                await self._raise_if_duplicate(session, fields.get("email"), exc)
                raise StoreError("Failed to insert employee") from exc
            except SQLAlchemyError as exc:
                await session.rollback()
                raise StoreError("Failed to insert employee") from exc

        logger.info("Employee created", extra={"employee_id": employee.id})
        return employee

    async def list_active(self) -> List[Employee]:
        stmt = select(Employee).where(Employee.deleted_at.is_(None)).order_by(Employee.id)
        return await self._fetch_all(stmt, "Failed to list employees")

    async def search(self, term: str) -> List[Employee]:
        """
        name / email / position 에 대해 대소문자 무시 부분 일치 검색.

        icontains(autoescape=True)는 term을 바인딩 파라미터로 넘기고
        '%' '_' 를 이스케이프하므로 term은 항상 리터럴로 취급된다.
        """
        stmt = (
            select(Employee)
            .where(
                Employee.deleted_at.is_(None),
                or_(
                    Employee.name.icontains(term, autoescape=True),
                    Employee.email.icontains(term, autoescape=True),
                    Employee.position.icontains(term, autoescape=True),
                ),
            )
            .order_by(Employee.id)
        )
        return await self._fetch_all(stmt, "Failed to search employees")

    async def get_active(self, employee_id: int) -> Employee:
        async with self._session_factory() as session:
            try:
                employee = await self._load_active(session, employee_id)
            except SQLAlchemyError as exc:
                raise StoreError("Failed to retrieve employee") from exc

        if employee is None:
            raise NotFoundError(f"Employee {employee_id} not found")
        return employee

    async def update(self, employee_id: int, changes: Mapping[str, Any]) -> Employee:
        """changes에 들어있는 필드만 덮어쓴다 (partial update)."""
        async with self._session_factory() as session:
            try:
                employee = await self._load_active(session, employee_id)
                if employee is None:
                    raise NotFoundError(f"Employee {employee_id} not found")

                new_email = changes.get("email")
                if new_email is not None and new_email != employee.email:
                    if await self._email_taken(session, new_email, exclude_id=employee_id):
                        raise DuplicateKeyError("email already in use")

                for field in UPDATABLE_FIELDS:
                    if field in changes:
                        setattr(employee, field, changes[field])

                await session.commit()
                await session.refresh(employee)
            except IntegrityError as exc:
                await session.rollback()
                if "email" in changes:
                    await self._raise_if_duplicate(
                        session, changes["email"], exc, exclude_id=employee_id
                    )
                raise StoreError("Failed to update employee") from exc
            except SQLAlchemyError as exc:
                await session.rollback()
                raise StoreError("Failed to update employee") from exc

        logger.info("Employee updated", extra={"employee_id": employee_id})
        return employee

    async def soft_delete(self, employee_id: int) -> None:
        async with self._session_factory() as session:
            try:
                employee = await self._load_active(session, employee_id)
                if employee is None:
                    raise NotFoundError(f"Employee {employee_id} not found")

                now = utcnow()
                employee.deleted_at = now
                employee.updated_at = now
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                raise StoreError("Failed to delete employee") from exc

        logger.info("Employee soft-deleted", extra={"employee_id": employee_id})

    async def _fetch_all(self, stmt, failure_message: str) -> List[Employee]:
        async with self._session_factory() as session:
            try:
                result = await session.execute(stmt)
            except SQLAlchemyError as exc:
                raise StoreError(failure_message) from exc
            return list(result.scalars().all())

    @staticmethod
    async def _load_active(session: AsyncSession, employee_id: int) -> Optional[Employee]:
        result = await session.execute(
            select(Employee).where(
                Employee.id == employee_id,
                Employee.deleted_at.is_(None),
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def _email_taken(
        session: AsyncSession,
        email: str,
        exclude_id: Optional[int] = None,
    ) -> bool:
        stmt = select(Employee.id).where(
            Employee.email == email,
            Employee.deleted_at.is_(None),
        )
        if exclude_id is not None:
            stmt = stmt.where(Employee.id != exclude_id)
        result = await session.execute(stmt.limit(1))
        return result.first() is not None

    async def _raise_if_duplicate(
        self,
        session: AsyncSession,
        email: str,
        exc: IntegrityError,
        exclude_id: Optional[int] = None,
    ) -> None:
        try:
            taken = await self._email_taken(session, email, exclude_id=exclude_id)
        except SQLAlchemyError as lookup_exc:
            raise StoreError("Failed to verify email uniqueness") from lookup_exc
        if taken:
            raise DuplicateKeyError("email already in use") from exc
