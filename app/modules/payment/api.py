import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import authenticate, bearer_scheme, get_current_user, get_db, get_payment_service
from app.core.exceptions import FestivaError, MalformedRequest
from app.modules.payment.service import PaymentService
from app.schemas.auth_schema import AuthenticatedUser
from app.schemas.payment_schema import CreatePaymentRequest, CreatePaymentResponse, VerifyPaymentResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Payments"])


async def _parse_payload(request: Request):
    """Parses the raw request body as JSON."""
    body_bytes = await request.body()
    try:
        return json.loads(body_bytes.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedRequest(f"Invalid JSON payload: {e}")


@router.post("/create-payment", response_model=CreatePaymentResponse)
async def create_payment(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
    payment_service: PaymentService = Depends(get_payment_service),
):
    """
    Creates a PIX charge for a paid plan and a pending subscription row.
    Every failure of this endpoint is reported as 400.
    """
    try:
        user = authenticate(credentials)
        payload = await _parse_payload(request)
        if not isinstance(payload, dict):
            raise MalformedRequest("Request body must be a JSON object")
        data = CreatePaymentRequest.model_validate(payload)
        return await payment_service.create_payment(
            db,
            user,
            plan=data.plan,
            return_url=data.returnUrl,
            origin=request.headers.get("origin"),
        )
    except FestivaError as e:
        logger.error(f"Error creating payment: {e.detail}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.detail)
    except ValidationError as e:
        logger.warning(f"Invalid create-payment body: {e}")
        if any(error["loc"][:1] == ("plan",) for error in e.errors()):
            detail = "Invalid plan selected"
        else:
            detail = "Invalid request body"
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


@router.post("/payment-webhook")
async def payment_webhook(
    request: Request,
    webhookSecret: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    payment_service: PaymentService = Depends(get_payment_service),
):
    """
    Receives AbacatePay billing events. Anything that parses is acknowledged
    with 200 so the provider does not retry non-actionable events.
    """
    payment_service.check_webhook_secret(webhookSecret)
    payload = await _parse_payload(request)
    logger.info(f"Webhook received: {json.dumps(payload)}")
    return await payment_service.handle_webhook(db, payload)


@router.post("/verify-payment", response_model=VerifyPaymentResponse)
async def verify_payment(
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    payment_service: PaymentService = Depends(get_payment_service),
):
    """Polls the provider for the caller's latest pending charge."""
    return await payment_service.verify_payment(db, current_user)
