from __future__ import annotations

from datetime import date, time
from typing import Any, Optional

import httpx


def _encode(value: Any) -> Any:
    if isinstance(value, (date, time)):
        return value.isoformat()
    return value


class AssistantApiClient:
    """HTTP client the Telegram bot uses to reach the FastAPI backend."""

    def __init__(self, api_base_url: str) -> None:
        self.client = httpx.AsyncClient(
            base_url=api_base_url,
            timeout=httpx.Timeout(timeout=60.0, connect=10.0),
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    async def ensure_user(
        self, telegram_id: int, full_name: Optional[str], display_name: Optional[str] = None
    ) -> dict[str, Any]:
        payload = {"telegram_id": telegram_id, "full_name": full_name, "display_name": display_name}
        response = await self.client.post("/api/users", json=payload)
        response.raise_for_status()
        return response.json()

    # Wizard state

    async def get_state(self, user_id: str) -> dict[str, Any]:
        response = await self.client.get(f"/api/users/{user_id}/state")
        response.raise_for_status()
        return response.json()

    async def set_state(
        self, user_id: str, current_state: Optional[str], state_data: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        payload = {"current_state": current_state, "state_data": state_data or {}}
        response = await self.client.put(f"/api/users/{user_id}/state", json=payload)
        response.raise_for_status()
        return response.json()

    async def update_state_data(self, user_id: str, data: dict[str, Any]) -> dict[str, Any]:
        response = await self.client.patch(f"/api/users/{user_id}/state", json={"state_data": data})
        response.raise_for_status()
        return response.json()

    async def clear_state(self, user_id: str) -> None:
        response = await self.client.delete(f"/api/users/{user_id}/state")
        response.raise_for_status()

    async def set_last_message_id(self, user_id: str, message_id: Optional[int]) -> None:
        response = await self.client.put(
            f"/api/users/{user_id}/last-message", json={"message_id": message_id}
        )
        response.raise_for_status()

    # Event drafts

    async def get_active_draft(self, user_id: str) -> Optional[dict[str, Any]]:
        response = await self.client.get("/api/events/draft", params={"user_id": user_id})
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        response.raise_for_status()
        return response.json()

    async def start_draft(self, user_id: str) -> dict[str, Any]:
        response = await self.client.post("/api/events/draft", json={"user_id": user_id})
        response.raise_for_status()
        return response.json()

    async def update_draft(self, event_id: str, **fields: Any) -> dict[str, Any]:
        payload = {key: _encode(value) for key, value in fields.items()}
        response = await self.client.patch(f"/api/events/{event_id}", json=payload)
        response.raise_for_status()
        return response.json()

    async def confirm_draft(self, event_id: str) -> dict[str, Any]:
        response = await self.client.post(f"/api/events/{event_id}/confirm")
        response.raise_for_status()
        return response.json()

    async def cancel_draft(self, event_id: str) -> dict[str, Any]:
        response = await self.client.post(f"/api/events/{event_id}/cancel")
        response.raise_for_status()
        return response.json()

    # Health

    async def log_sleep(self, user_id: str, kind: str) -> dict[str, Any]:
        response = await self.client.post("/api/health/sleep", json={"user_id": user_id, "kind": kind})
        response.raise_for_status()
        return response.json()

    async def sleep_stats(self, user_id: str) -> dict[str, Any]:
        response = await self.client.get("/api/health/sleep/stats", params={"user_id": user_id})
        response.raise_for_status()
        return response.json()

    async def sleep_weekly(self, user_id: str) -> list[dict[str, Any]]:
        response = await self.client.get("/api/health/sleep/weekly", params={"user_id": user_id})
        response.raise_for_status()
        return response.json()

    async def log_water(self, user_id: str, amount_ml: int) -> dict[str, Any]:
        response = await self.client.post(
            "/api/health/water", json={"user_id": user_id, "amount_ml": amount_ml}
        )
        response.raise_for_status()
        return response.json()

    async def water_stats(self, user_id: str) -> dict[str, Any]:
        response = await self.client.get("/api/health/water/stats", params={"user_id": user_id})
        response.raise_for_status()
        return response.json()

    async def water_weekly(self, user_id: str) -> list[dict[str, Any]]:
        response = await self.client.get("/api/health/water/weekly", params={"user_id": user_id})
        response.raise_for_status()
        return response.json()

    # Finances

    async def list_categories(
        self, user_id: str, category_type: Optional[str] = None
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"user_id": user_id}
        if category_type:
            params["category_type"] = category_type
        response = await self.client.get("/api/finances/categories", params=params)
        response.raise_for_status()
        return response.json()

    async def create_category(self, payload: dict[str, Any]) -> dict[str, Any]:
        response = await self.client.post("/api/finances/categories", json=payload)
        response.raise_for_status()
        return response.json()

    async def create_transaction(self, payload: dict[str, Any]) -> dict[str, Any]:
        response = await self.client.post("/api/finances/transactions", json=payload)
        response.raise_for_status()
        return response.json()

    async def list_transactions(self, user_id: str, *, month: int, year: int) -> list[dict[str, Any]]:
        params = {"user_id": user_id, "month": month, "year": year}
        response = await self.client.get("/api/finances/transactions", params=params)
        response.raise_for_status()
        return response.json()

    async def month_summary(self, user_id: str, *, month: int, year: int) -> dict[str, Any]:
        params = {"user_id": user_id, "month": month, "year": year}
        response = await self.client.get("/api/finances/summary", params=params)
        response.raise_for_status()
        return response.json()

    async def list_bills(self, user_id: str, *, month: int, year: int) -> list[dict[str, Any]]:
        params = {"user_id": user_id, "month": month, "year": year}
        response = await self.client.get("/api/finances/bills", params=params)
        response.raise_for_status()
        return response.json()

    async def list_goals(self, user_id: str) -> list[dict[str, Any]]:
        response = await self.client.get("/api/finances/goals", params={"user_id": user_id})
        response.raise_for_status()
        return response.json()

    # Classifier

    async def classify(self, text: str) -> dict[str, Any]:
        response = await self.client.post("/api/llm/classify", json={"text": text})
        response.raise_for_status()
        return response.json()
