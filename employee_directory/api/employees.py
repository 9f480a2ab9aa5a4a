from functools import partial

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from employee_directory.core.security import hash_credential
from employee_directory.handlers import employees as handlers
from employee_directory.handlers.context import HandlerResponse, RequestContext
from employee_directory.services.employee_store import EmployeeStore

router = APIRouter(
    prefix="/api/employees",
    tags=["employees"],
)


def get_store(request: Request) -> EmployeeStore:
    """startup 시 한 번 만든 저장소 인스턴스를 꺼낸다."""
    return request.app.state.store


async def get_context(request: Request) -> RequestContext:
    return RequestContext(
        path_params=dict(request.path_params),
        query_params=dict(request.query_params),
        body=await request.body(),
    )


def _to_response(result: HandlerResponse) -> JSONResponse:
    return JSONResponse(status_code=result.status_code, content=result.body)


@router.post("")
async def create_employee(
    request: Request,
    ctx: RequestContext = Depends(get_context),
    store: EmployeeStore = Depends(get_store),
):
    hasher = partial(hash_credential, rounds=request.app.state.settings.BCRYPT_ROUNDS)
    return _to_response(await handlers.create_employee(ctx, store, hasher=hasher))


@router.get("")
async def list_employees(
    ctx: RequestContext = Depends(get_context),
    store: EmployeeStore = Depends(get_store),
):
    return _to_response(await handlers.list_employees(ctx, store))


# "/{employee_id}" 보다 먼저 등록해야 "search"가 id로 잡히지 않음
@router.get("/search")
async def search_employees(
    ctx: RequestContext = Depends(get_context),
    store: EmployeeStore = Depends(get_store),
):
    return _to_response(await handlers.search_employees(ctx, store))


@router.get("/{employee_id}")
async def get_employee(
    ctx: RequestContext = Depends(get_context),
    store: EmployeeStore = Depends(get_store),
):
    return _to_response(await handlers.get_employee(ctx, store))


@router.put("/{employee_id}")
async def update_employee(
    ctx: RequestContext = Depends(get_context),
    store: EmployeeStore = Depends(get_store),
):
    return _to_response(await handlers.update_employee(ctx, store))


@router.delete("/{employee_id}")
async def delete_employee(
    ctx: RequestContext = Depends(get_context),
    store: EmployeeStore = Depends(get_store),
):
    return _to_response(await handlers.delete_employee(ctx, store))
