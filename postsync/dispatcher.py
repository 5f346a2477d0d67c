"""Change dispatcher: maps a validated webhook event onto store operations."""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel

from postsync.posts import WebhookEvent, file_name, render_post
from postsync.store.base import FileStore
from postsync.store.orchestrator import RenameOrchestrator

logger = logging.getLogger(__name__)


class DispatchResult(BaseModel):
    action: Literal["created", "updated", "renamed", "deleted", "skipped"]
    name: str | None = None


class ChangeDispatcher:
    """Decides create / update / rename / delete for one event and performs it.

    Every lookup runs immediately before the mutating call that uses its sha,
    so a re-delivered event converges on the same end state.
    """

    def __init__(self, store: FileStore, file_extension: str = "md") -> None:
        self.store = store
        self.file_extension = file_extension
        self.orchestrator = RenameOrchestrator(store)

    async def dispatch(self, event: WebhookEvent) -> DispatchResult:
        if event.event == "post_delete":
            result = await self._delete(event)
        elif event.event == "post_create":
            result = await self._create(event)
        else:
            result = await self._update(event)
        logger.info("%s %s: %s", event.event, event.slug_id, result.action)
        return result

    def _render(self, event: WebhookEvent) -> str:
        return render_post(
            title=event.content.title,
            body=event.content.body,
            date_value=event.timestamp,
            description=event.content.subtitle,
            tags=event.content.tags,
        )

    def _file_name(self, event: WebhookEvent) -> str:
        return file_name(event.content.title, event.slug_id, self.file_extension)

    async def _delete(self, event: WebhookEvent) -> DispatchResult:
        post = await self.store.find_by_external_id(event.slug_id)
        if post is None:
            return DispatchResult(action="skipped")
        await self.store.delete(post.name, post.sha, f"delete: {post.name}")
        return DispatchResult(action="deleted", name=post.name)

    async def _create(self, event: WebhookEvent) -> DispatchResult:
        name = self._file_name(event)
        await self.store.create(name, self._render(event), f"create: {name}")
        return DispatchResult(action="created", name=name)

    async def _update(self, event: WebhookEvent) -> DispatchResult:
        name = self._file_name(event)
        content = self._render(event)
        post = await self.store.find_by_external_id(event.slug_id)

        if post is None:
            await self.store.create(name, content, f"create: {name}")
            return DispatchResult(action="created", name=name)

        if post.name == name:
            await self.store.update(name, content, post.sha, f"update: {name}")
            return DispatchResult(action="updated", name=name)

        await self.orchestrator.rename_and_replace(post.name, post.sha, name, content)
        return DispatchResult(action="renamed", name=name)
