"""Notification request/response schemas."""

from uuid import UUID

from pydantic import BaseModel, Field


class OutboundMessage(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    body: str = Field("", max_length=4000)
    icon: str | None = Field(None, max_length=500)
    image: str | None = Field(None, max_length=500)
    action_url: str | None = Field(None, max_length=500)
    category: str | None = Field(None, max_length=50)
    metadata: dict = Field(default_factory=dict)
    related_entity_id: str | None = Field(None, max_length=64)


class SendRequest(BaseModel):
    user_id: UUID | None = None
    notification: OutboundMessage


class BulkSendRequest(BaseModel):
    user_ids: list[UUID] = Field(..., min_length=1, max_length=10_000)
    notification: OutboundMessage


class TrackRequest(BaseModel):
    history_id: UUID | None = None
    interaction_type: str = Field(..., min_length=1, max_length=30, pattern=r"^[a-z_]+$")
    metadata: dict = Field(default_factory=dict)

