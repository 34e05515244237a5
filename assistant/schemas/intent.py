from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..models.finance import TransactionType


class IntentType(str, Enum):
    FINANCE_TRANSACTION = "finance_transaction"
    HEALTH_WATER = "health_water"
    CHAT = "chat"


class ClassifyRequest(BaseModel):
    text: str = Field(min_length=1, max_length=4096)


class ClassifiedIntent(BaseModel):
    """What the classifier thinks a free-text message asks for."""

    type: IntentType = IntentType.CHAT
    data: dict[str, Any] = Field(default_factory=dict)
    response: str = ""


class FinanceIntentData(BaseModel):
    type: TransactionType
    amount: Decimal = Field(gt=0)
    category_name: str = Field(default="Other", alias="categoryName")
    category_emoji: str = Field(default="📦", alias="categoryEmoji")
    description: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class WaterIntentData(BaseModel):
    amount_ml: int = Field(gt=0, alias="amountMl")

    model_config = ConfigDict(populate_by_name=True)
