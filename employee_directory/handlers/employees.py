"""
Employee 요청 핸들러 (작업당 하나, 상태 없음).

흐름: JSON 파싱 → sanitize → 검증 → (생성 시) 해싱 → 저장소 호출 → 응답 변환
- 검증 실패 메시지는 "; " 로 합쳐서 한 번에 400으로 돌려준다.
- 저장소/해싱 오류는 내부 로그에만 상세를 남기고 응답은 일반 메시지만.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Mapping

from pydantic import ValidationError as PydanticValidationError

from employee_directory.core.exceptions import (
    ClientInputError,
    DuplicateKeyError,
    HashingError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from employee_directory.core.sanitize import sanitize, sanitize_search_term
from employee_directory.core.security import hash_credential
from employee_directory.core.validation import ensure_valid
from employee_directory.handlers.context import (
    HandlerResponse,
    RequestContext,
    error_response,
)
from employee_directory.schemas.employee import (
    TEXT_FIELDS,
    Employee as EmployeeSchema,
    EmployeeCreate,
    EmployeeUpdate,
)
from employee_directory.services.employee_store import UPDATABLE_FIELDS, EmployeeStore

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "An employee with this email already exists"
NOT_FOUND_MESSAGE = "Employee not found"


def _serialize(employee) -> Dict[str, Any]:
    return EmployeeSchema.model_validate(employee).model_dump(mode="json")


def _sanitize_fields(record: Mapping[str, Any]) -> Dict[str, Any]:
    cleaned = dict(record)
    for name in TEXT_FIELDS:
        if isinstance(cleaned.get(name), str):
            cleaned[name] = sanitize(cleaned[name])
    return cleaned


def _parse(ctx: RequestContext, schema):
    try:
        return schema.model_validate(ctx.json_object())
    except PydanticValidationError as exc:
        raise ClientInputError("Invalid request format") from exc


def _store_failure(exc: StoreError, message: str) -> HandlerResponse:
    if isinstance(exc, DuplicateKeyError):
        return error_response(409, DUPLICATE_EMAIL_MESSAGE)
    if isinstance(exc, NotFoundError):
        return error_response(404, NOT_FOUND_MESSAGE)
    logger.error("%s: %s", message, exc, exc_info=exc)
    return error_response(500, message)


async def create_employee(
    ctx: RequestContext,
    store: EmployeeStore,
    hasher: Callable[[str], str] = hash_credential,
) -> HandlerResponse:
    try:
        payload = _parse(ctx, EmployeeCreate)
        record = _sanitize_fields(payload.model_dump())
        ensure_valid(record)
    except ClientInputError as exc:
        return error_response(400, str(exc))

    # name을 비밀번호 대용으로 해싱 (데모용). bcrypt는 느리므로 스레드에서 실행
    try:
        password_hash = await asyncio.to_thread(hasher, record["name"])
    except HashingError as exc:
        logger.error("Credential hashing failed", exc_info=exc)
        return error_response(500, "Failed to process request")

    try:
        employee = await store.create({**record, "password_hash": password_hash})
    except StoreError as exc:
        return _store_failure(exc, "Failed to create employee")

    return HandlerResponse(201, {"data": _serialize(employee)})


async def list_employees(ctx: RequestContext, store: EmployeeStore) -> HandlerResponse:
    try:
        employees = await store.list_active()
    except StoreError as exc:
        return _store_failure(exc, "Failed to retrieve employees")

    return HandlerResponse(200, {"data": [_serialize(e) for e in employees]})


async def search_employees(ctx: RequestContext, store: EmployeeStore) -> HandlerResponse:
    # sanitize는 보조 수단일 뿐, 실제 쿼리는 항상 파라미터 바인딩
    term = sanitize_search_term(ctx.query_params.get("q") or "")
    if not term:
        return error_response(400, "Search query is required")

    try:
        employees = await store.search(term)
    except StoreError as exc:
        return _store_failure(exc, "Failed to search employees")

    return HandlerResponse(200, {"data": [_serialize(e) for e in employees]})


async def get_employee(ctx: RequestContext, store: EmployeeStore) -> HandlerResponse:
    try:
        employee_id = ctx.employee_id()
    except ClientInputError as exc:
        return error_response(400, str(exc))

    try:
        employee = await store.get_active(employee_id)
    except StoreError as exc:
        return _store_failure(exc, "Failed to retrieve employee")

    return HandlerResponse(200, {"data": _serialize(employee)})


async def update_employee(ctx: RequestContext, store: EmployeeStore) -> HandlerResponse:
    """
    부분 수정: 바디에 있는 필드만 덮어쓰고 나머지는 유지.

    수정 결과(기존 값 + 변경 값)를 통째로 다시 검증한다.
    password_hash는 생성 시에만 계산하며, name이 바뀌어도 다시 계산하지 않는다.
    """
    try:
        employee_id = ctx.employee_id()
        payload = _parse(ctx, EmployeeUpdate)
    except ClientInputError as exc:
        return error_response(400, str(exc))

    changes = _sanitize_fields(payload.changes())

    try:
        current = await store.get_active(employee_id)
    except StoreError as exc:
        return _store_failure(exc, "Failed to retrieve employee")

    merged = {field: getattr(current, field) for field in UPDATABLE_FIELDS}
    merged.update(changes)

    try:
        ensure_valid(merged)
    except ValidationError as exc:
        return error_response(400, str(exc))

    if not changes:
        return HandlerResponse(200, {"data": _serialize(current)})

    try:
        employee = await store.update(employee_id, changes)
    except StoreError as exc:
        return _store_failure(exc, "Failed to update employee")

    return HandlerResponse(200, {"data": _serialize(employee)})


async def delete_employee(ctx: RequestContext, store: EmployeeStore) -> HandlerResponse:
    try:
        employee_id = ctx.employee_id()
    except ClientInputError as exc:
        return error_response(400, str(exc))

    try:
        await store.soft_delete(employee_id)
    except StoreError as exc:
        return _store_failure(exc, "Failed to delete employee")

    return HandlerResponse(200, {"data": True})
