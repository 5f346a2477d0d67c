"""Pydantic schema for inbound Able webhook bodies."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, model_validator

EventType = Literal["post_create", "post_update", "post_delete"]


class EventMetadata(BaseModel):
    token: str
    slug_id: str = Field(min_length=1, description="External id assigned by Able")
    created_at: str | None = None
    updated_at: str | None = None


class EventContent(BaseModel):
    title: str | None = None
    body: str = ""
    subtitle: str | None = None
    tags: list[str] = Field(default_factory=list)


class WebhookEvent(BaseModel):
    """A post_create / post_update / post_delete notification."""

    event: EventType
    metadata: EventMetadata
    content: EventContent = Field(default_factory=EventContent)

    @model_validator(mode="after")
    def _require_content_fields(self) -> WebhookEvent:
        if self.event == "post_delete":
            return self
        if not self.content.title:
            raise ValueError(f"content.title is required for {self.event}")
        if self.timestamp is None:
            field = "created_at" if self.event == "post_create" else "updated_at"
            raise ValueError(f"metadata.{field} is required for {self.event}")
        return self

    @property
    def slug_id(self) -> str:
        return self.metadata.slug_id

    @property
    def timestamp(self) -> str | None:
        """created_at for creates, updated_at for updates."""
        if self.event == "post_create":
            return self.metadata.created_at
        if self.event == "post_update":
            return self.metadata.updated_at
        return None
