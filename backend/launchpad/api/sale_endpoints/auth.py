import logging
import secrets
from datetime import datetime, timezone
from typing import Optional

from eth_account import Account
from eth_account.messages import encode_defunct
from fastapi import APIRouter, HTTPException, status

from launchpad.core.config import settings
from launchpad.models.sale import AuthMessage, AuthPurpose
from launchpad.schemas.sale import AuthMessageResponse

from .common import validate_wallet_address

logger = logging.getLogger(__name__)
router = APIRouter()

_MESSAGE_INTROS = {
    AuthPurpose.ADMIN: "Launchpad owner login\n\nSign this message to add a sale project.",
    AuthPurpose.PURCHASE: "Launchpad purchase\n\nSign this message to buy project tokens from your wallet.",
}


async def _issue_message(address: str, purpose: AuthPurpose) -> AuthMessageResponse:
    if not validate_wallet_address(address):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unsupported address format. Expected EVM address.",
        )

    nonce_str = secrets.token_hex(16)
    message = (
        f"{_MESSAGE_INTROS[purpose]}\n\n"
        f"Wallet Address: {address.lower()}\n"
        f"Nonce: {nonce_str}"
    )
    now = int(datetime.now(timezone.utc).timestamp())
    expires_at = now + settings.auth_message_ttl_seconds

    await AuthMessage.update_or_create(
        wallet_address=address.lower(),
        purpose=purpose,
        defaults={"message": message, "expires_at": expires_at},
    )

    return AuthMessageResponse(
        message=message,
        expires_at=datetime.fromtimestamp(expires_at, tz=timezone.utc),
    )


@router.get(
    "/admin-message",
    response_model=AuthMessageResponse,
    summary="Get owner login message",
)
async def get_admin_message(address: str) -> AuthMessageResponse:
    """Issue a one-time message the owner signs to add a project."""
    return await _issue_message(address, AuthPurpose.ADMIN)


@router.get(
    "/buyer-message",
    response_model=AuthMessageResponse,
    summary="Get buyer purchase message",
)
async def get_buyer_message(address: str) -> AuthMessageResponse:
    """Issue a one-time message a buyer signs to pay for one purchase."""
    return await _issue_message(address, AuthPurpose.PURCHASE)


async def verify_signature(address: str, signature: Optional[str], purpose: AuthPurpose) -> str:
    """
    Check ``signature`` against the message issued to ``address`` for ``purpose``.

    Returns the recovered wallet address (lowercase). The message is consumed
    on success. Any failure is a 401.
    """
    if not signature:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Signature is required.",
        )

    auth_message = await AuthMessage.get_or_none(wallet_address=address.lower(), purpose=purpose)
    if not auth_message:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid message or message mismatch.",
        )

    if int(datetime.now(timezone.utc).timestamp()) > auth_message.expires_at:
        await auth_message.delete()
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Message has expired. Please request a new one.",
        )

    try:
        recovered_address = Account.recover_message(
            encode_defunct(text=auth_message.message), signature=signature
        )
    except Exception as e:
        logger.warning(f"{purpose.value} signature could not be decoded: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid signature format: {str(e)}",
        )

    if recovered_address.lower() != address.lower():
        logger.warning(f"{purpose.value} signature mismatch for {address}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Signature verification failed: recovered address does not match the wallet.",
        )

    # Single use
    await auth_message.delete()
    return recovered_address.lower()
