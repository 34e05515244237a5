import logging

from fastapi import APIRouter, HTTPException, status

from ..schemas.intent import ClassifiedIntent, ClassifyRequest
from ..services import get_intent_classifier
from ..services.llm import IntentClassificationError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/classify", response_model=ClassifiedIntent)
async def classify_endpoint(payload: ClassifyRequest) -> ClassifiedIntent:
    try:
        classifier = get_intent_classifier()
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    try:
        return await classifier.classify(payload.text)
    except IntentClassificationError as exc:
        logger.warning("Intent classification failed: %s", exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
