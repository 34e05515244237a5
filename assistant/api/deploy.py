"""Signed rebuild-and-restart hook for the deployed host."""

import hashlib
import hmac
import logging
from typing import Optional

import anyio
from fastapi import APIRouter, BackgroundTasks, Header, HTTPException, Query, Request, status

from ..config import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter()


class DeployError(RuntimeError):
    pass


def deploy_commands(settings: Settings) -> list[list[str]]:
    return [
        ["git", "pull", "origin", settings.deploy_branch],
        ["docker-compose", "down"],
        ["docker-compose", "up", "-d", "--build"],
    ]


def sign_payload(secret: str, body: bytes) -> str:
    digest = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return f"sha256={digest}"


def verify_signature(secret: str, body: bytes, signature: Optional[str]) -> bool:
    if not signature:
        return False
    return hmac.compare_digest(sign_payload(secret, body), signature)


def _require_secret(settings: Settings) -> str:
    if not settings.deploy_webhook_secret:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return settings.deploy_webhook_secret


async def run_deploy(settings: Settings) -> None:
    with anyio.fail_after(settings.deploy_timeout_seconds):
        for command in deploy_commands(settings):
            logger.info("Deploy step: %s", " ".join(command))
            result = await anyio.run_process(
                command, cwd=settings.deploy_directory, check=False
            )
            if result.stdout:
                logger.info("stdout: %s", result.stdout.decode(errors="replace").strip())
            if result.stderr:
                logger.info("stderr: %s", result.stderr.decode(errors="replace").strip())
            if result.returncode != 0:
                raise DeployError(f"{' '.join(command)} exited with {result.returncode}")


async def _run_deploy_in_background(settings: Settings) -> None:
    try:
        await run_deploy(settings)
    except (DeployError, TimeoutError, OSError):
        logger.exception("Background deploy failed")
    else:
        logger.info("Background deploy completed")


@router.post("/deploy")
async def deploy_webhook(
    request: Request,
    x_hub_signature_256: Optional[str] = Header(default=None),
) -> dict[str, str]:
    settings = get_settings()
    secret = _require_secret(settings)
    body = await request.body()
    if not verify_signature(secret, body, x_hub_signature_256):
        logger.warning("Deploy webhook rejected: invalid signature")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid signature")

    try:
        payload = await request.json() if body else {}
    except ValueError as exc:
        logger.warning("Deploy webhook rejected: body is not JSON")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Payload must be JSON") from exc
    ref = payload.get("ref") if isinstance(payload, dict) else None
    expected_ref = f"refs/heads/{settings.deploy_branch}"
    if ref and ref != expected_ref:
        logger.info("Deploy webhook ignoring push to %s", ref)
        return {"status": "ignored", "reason": f"Not {settings.deploy_branch} branch"}

    logger.info("Deploy webhook received, starting deploy")
    try:
        await run_deploy(settings)
    except (DeployError, TimeoutError, OSError) as exc:
        logger.exception("Deploy failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc) or "Deploy timed out"
        ) from exc
    logger.info("Deploy completed")
    return {"status": "success", "message": "Deploy completed"}


@router.get("/deploy/trigger")
async def deploy_trigger(
    background_tasks: BackgroundTasks, secret: str = Query(default="")
) -> dict[str, str]:
    settings = get_settings()
    expected = _require_secret(settings)
    if not hmac.compare_digest(secret.encode(), expected.encode()):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid secret")
    logger.info("Manual deploy triggered")
    background_tasks.add_task(_run_deploy_in_background, settings)
    return {"status": "started", "message": "Deploy started in background"}
