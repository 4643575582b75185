"""
API v1 routes - account administration.

Every endpoint requires HTTP Basic credentials of the admin account.
Accounts created here are confirmed immediately and skip the OTP
registration workflow.
"""

from fastapi import APIRouter, Depends, HTTPException, Response, status

from resume_builder.api.dependencies import get_administration_service, require_admin
from resume_builder.api.models import (
    AccountCreateRequest,
    AccountImportEntry,
    AccountOut,
    ErrorResponse,
    RoleUpdateRequest,
)
from resume_builder.domain.administration import AdministrationService
from resume_builder.domain.exceptions import (
    AccountNotFound,
    EmailAlreadyRegistered,
    MissingRequiredField,
    NoNewAccounts,
    RoleChangeNotAllowed,
)
from resume_builder.domain.models import AccountImport, RegistrationCandidate, Role

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        403: {"model": ErrorResponse, "description": "Caller is not the admin"},
    },
)

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Account not found"}}
_CONFLICT = {409: {"model": ErrorResponse, "description": "Email already registered"}}


def _not_found(exc: AccountNotFound) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


async def _add(
    request_data: AccountCreateRequest, role: Role, service: AdministrationService
) -> AccountOut:
    candidate = RegistrationCandidate(
        email=request_data.email,
        first_name=request_data.first_name,
        last_name=request_data.last_name,
        password=request_data.password,
    )
    try:
        account = await service.add_account(candidate, role)
    except EmailAlreadyRegistered:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A user with this email already exists",
        ) from None
    except MissingRequiredField as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    return AccountOut.model_validate(account)


@router.get("/users", response_model=list[AccountOut], summary="List accounts")
def list_users(
    role: Role | None = None,
    service: AdministrationService = Depends(get_administration_service),
) -> list[AccountOut]:
    """List accounts with the given role, or every non-admin account."""
    return [AccountOut.model_validate(a) for a in service.list_accounts(role)]


@router.get("/managers", response_model=list[AccountOut], summary="List managers")
def list_managers(
    service: AdministrationService = Depends(get_administration_service),
) -> list[AccountOut]:
    return [AccountOut.model_validate(a) for a in service.list_accounts(Role.MANAGER)]


@router.post(
    "/users",
    response_model=AccountOut,
    status_code=status.HTTP_201_CREATED,
    responses=_CONFLICT,
    summary="Create a user account",
)
async def add_user(
    request_data: AccountCreateRequest,
    service: AdministrationService = Depends(get_administration_service),
) -> AccountOut:
    return await _add(request_data, Role.USER, service)


@router.post(
    "/managers",
    response_model=AccountOut,
    status_code=status.HTTP_201_CREATED,
    responses=_CONFLICT,
    summary="Create a manager account",
)
async def add_manager(
    request_data: AccountCreateRequest,
    service: AdministrationService = Depends(get_administration_service),
) -> AccountOut:
    return await _add(request_data, Role.MANAGER, service)


@router.post(
    "/users/batch",
    response_model=list[AccountOut],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse, "description": "No new accounts in the batch"}},
    summary="Import employee accounts",
)
async def import_users(
    request_data: list[AccountImportEntry],
    service: AdministrationService = Depends(get_administration_service),
) -> list[AccountOut]:
    """
    Create User accounts for every entry whose email is not taken.

    Imported accounts have no password; each owner is emailed and sets
    one through the password reset flow.
    """
    entries = [
        AccountImport(email=e.email, first_name=e.first_name, last_name=e.last_name)
        for e in request_data
    ]
    try:
        created = await service.import_accounts(entries)
    except NoNewAccounts:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No new employees to add",
        ) from None
    return [AccountOut.model_validate(a) for a in created]


@router.delete(
    "/users/{account_id}", status_code=status.HTTP_204_NO_CONTENT, responses=_NOT_FOUND
)
def delete_user(
    account_id: int,
    service: AdministrationService = Depends(get_administration_service),
) -> Response:
    """Delete any account, and its resumes with it."""
    try:
        service.delete_account(account_id)
    except AccountNotFound as e:
        raise _not_found(e) from None
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/managers/{account_id}", status_code=status.HTTP_204_NO_CONTENT, responses=_NOT_FOUND
)
def delete_manager(
    account_id: int,
    service: AdministrationService = Depends(get_administration_service),
) -> Response:
    try:
        service.delete_account(account_id, role=Role.MANAGER)
    except AccountNotFound as e:
        raise _not_found(e) from None
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch(
    "/users/{account_id}/role",
    response_model=AccountOut,
    responses={
        **_NOT_FOUND,
        400: {"model": ErrorResponse, "description": "Account is not a manager"},
    },
    summary="Change a manager's role",
)
def change_role(
    account_id: int,
    request_data: RoleUpdateRequest,
    service: AdministrationService = Depends(get_administration_service),
) -> AccountOut:
    try:
        account = service.change_role(account_id, request_data.role)
    except AccountNotFound as e:
        raise _not_found(e) from None
    except RoleChangeNotAllowed:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only a manager's role can be changed",
        ) from None
    return AccountOut.model_validate(account)
