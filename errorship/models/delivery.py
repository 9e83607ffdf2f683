"""Delivery models: the outbound HTTP envelope and the typed result."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

JSON_HEADERS: dict[str, str] = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class DeliveryRequest(BaseModel):
    """One POST of a serialized report to the ingestion endpoint."""

    model_config = ConfigDict(frozen=True)

    url: str
    method: str = "POST"
    headers: dict[str, str] = Field(default_factory=lambda: dict(JSON_HEADERS))
    body: bytes


class DeliveryOutcome(BaseModel):
    """Result of a single delivery attempt.

    ``status_code`` is ``None`` when the request never got a response;
    ``error`` then carries the failure detail.
    """

    model_config = ConfigDict(frozen=True)

    status_code: int | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return (
            self.error is None
            and self.status_code is not None
            and 200 <= self.status_code <= 299
        )
