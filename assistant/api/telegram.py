import hmac
import logging

from fastapi import APIRouter, HTTPException, Request, status

from ..config import get_settings
from ..telegram.bot import handle_update

logger = logging.getLogger(__name__)

router = APIRouter()


def verify_secret(secret: str) -> None:
    expected = get_settings().telegram_webhook_secret
    if not expected or not hmac.compare_digest(secret.encode(), expected.encode()):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)


@router.post("/webhook/{secret}", status_code=status.HTTP_204_NO_CONTENT)
async def telegram_webhook(secret: str, request: Request) -> None:
    verify_secret(secret)
    payload = await request.json()
    logger.debug("Telegram update %s", payload.get("update_id"))
    await handle_update(payload)
