from datetime import timedelta

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from config import ApplicationConfig
from src.api.error import ClientError, ServerError
from src.app.services.finalization_notifier import IFinalizationNotifier
from src.app.services.identity_directory import IIdentityDirectory
from src.app.services.reset_link_sender import IResetLinkSender
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.nip_reset import (
    ConfirmNipResetResponse,
    ConfirmNipResetUseCase,
    GetTokenInfoUseCase,
    LookupResponse,
    LookupVehiclesUseCase,
    SendResetLinkCommand,
    SendResetLinkResponse,
    SendResetLinkUseCase,
    TokenInfoResponse,
)
from src.depends import (
    get_finalization_notifier,
    get_identity_directory,
    get_request_context,
    get_reset_link_sender,
    get_unit_of_work,
)
from src.domain.entities import RequestContext

router = APIRouter(prefix="/nip", tags=["NIP Reset"])


class LookupRequest(BaseModel):
    """
    Lookup HTTP request payload

    Email + phone registered in the customer directory.
    """

    email: str = Field(..., max_length=255, description="Registered email")
    telefono: str = Field(..., max_length=32, description="Registered phone")


@router.post("/lookup", status_code=status.HTTP_200_OK, response_model=LookupResponse)
async def lookup(
    request: LookupRequest,
    directory: IIdentityDirectory = Depends(get_identity_directory),
):
    """
    Vehicle Lookup

    Returns the customer id and the vehicles whose NIP can be reset.

    Raises:
        - 400 Bad Request: Missing email/phone
        - 404 Not Found: No matching customer or no eligible vehicles
        - 503 Service Unavailable: Directory unreachable
    """
    use_case = LookupVehiclesUseCase(directory)
    result = await use_case.execute(request.email, request.telefono)

    if result.is_err():
        error = result.error
        if error.code == "INVALID_REQUEST":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code == "NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        elif error.code == "DEPENDENCY_UNAVAILABLE":
            raise ClientError(error, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
        raise ServerError(error)

    return result.value


class SendLinkRequest(BaseModel):
    """
    Send reset link HTTP request payload

    Repeats the lookup credentials plus the chosen vehicle.
    """

    email: str = Field(..., max_length=255)
    telefono: str = Field(..., max_length=32)
    cliente_id: str = Field(..., min_length=1, max_length=64)
    vehiculo_id: str = Field(..., min_length=1, max_length=64)


@router.post("/send-link", status_code=status.HTTP_200_OK, response_model=SendResetLinkResponse)
async def send_link(
    request: SendLinkRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    directory: IIdentityDirectory = Depends(get_identity_directory),
    sender: IResetLinkSender = Depends(get_reset_link_sender),
    context: RequestContext = Depends(get_request_context),
):
    """
    Send Reset Link

    Issues a single-use reset token for the vehicle and emails the link to
    the customer's registered address. Any earlier unused link for the same
    vehicle stops working.

    Raises:
        - 404 Not Found: Pairing not confirmed by the directory
        - 429 Too Many Requests: Too many links for this vehicle
        - 503 Service Unavailable: Directory unreachable
        - 500 Internal Server Error: Token or email failure
    """
    command = SendResetLinkCommand(
        email=request.email,
        phone=request.telefono,
        customer_id=request.cliente_id,
        vehicle_id=request.vehiculo_id,
        request_ip=context.ip,
        user_agent=context.user_agent,
    )

    use_case = SendResetLinkUseCase(
        uow,
        directory,
        sender,
        reset_url_base=ApplicationConfig.RESET_URL_BASE,
        token_ttl=timedelta(minutes=ApplicationConfig.TOKEN_TTL_MINUTES),
        rate_limit_window=timedelta(minutes=ApplicationConfig.RATE_LIMIT_WINDOW_MINUTES),
        rate_limit_max=ApplicationConfig.RATE_LIMIT_MAX_REQUESTS,
        issue_max_attempts=ApplicationConfig.TOKEN_ISSUE_MAX_ATTEMPTS,
    )
    result = await use_case.execute(command)

    if result.is_err():
        error = result.error
        if error.code == "INVALID_REQUEST":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code == "NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        elif error.code == "RATE_LIMITED":
            raise ClientError(error, status_code=status.HTTP_429_TOO_MANY_REQUESTS)
        elif error.code == "DEPENDENCY_UNAVAILABLE":
            raise ClientError(error, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
        raise ServerError(error)

    return result.value


@router.get("/token-info", status_code=status.HTTP_200_OK, response_model=TokenInfoResponse)
async def token_info(
    token: str = Query(...),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Reset Link Status

    Raises:
        - 403 Forbidden: Link unknown, already used or expired
    """
    use_case = GetTokenInfoUseCase(uow)
    result = await use_case.execute(token)

    if result.is_err():
        error = result.error
        if error.code == "INVALID_OR_EXPIRED_TOKEN":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        raise ServerError(error)

    return result.value


class ConfirmRequest(BaseModel):
    """
    Confirm NIP reset HTTP request payload

    Format checks on the NIP happen in the use case so every malformed
    NIP maps to the same 400.
    """

    token: str = Field(..., description="Token from the emailed link")
    nip: str = Field(..., max_length=16, description="New 4-digit NIP")
    nip_confirmacion: str = Field(..., max_length=16, description="New NIP, repeated")


@router.post("/confirm", status_code=status.HTTP_200_OK, response_model=ConfirmNipResetResponse)
async def confirm(
    request: ConfirmRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    notifier: IFinalizationNotifier = Depends(get_finalization_notifier),
):
    """
    Confirm NIP Reset

    Hands the new NIP to the system of record and consumes the link.

    Raises:
        - 400 Bad Request: NIPs differ or are not 4 digits
        - 403 Forbidden: Link unknown, already used or expired
        - 503 Service Unavailable: System of record unreachable, link still valid
    """
    use_case = ConfirmNipResetUseCase(uow, notifier)
    result = await use_case.execute(request.token, request.nip, request.nip_confirmacion)

    if result.is_err():
        error = result.error
        if error.code in ("NIP_MISMATCH", "INVALID_NIP"):
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code == "INVALID_OR_EXPIRED_TOKEN":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        elif error.code == "DEPENDENCY_UNAVAILABLE":
            raise ClientError(error, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
        raise ServerError(error)

    return result.value
