"""FastAPI app exposing the Able webhook endpoint."""

from __future__ import annotations

import hmac
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from postsync.config.loader import resolve_secret
from postsync.config.models import PostsyncConfig
from postsync.dispatcher import ChangeDispatcher, DispatchResult
from postsync.errors import Conflict, StaleVersion, StoreError, Unauthorized
from postsync.posts import WebhookEvent
from postsync.store import create_store

logger = logging.getLogger(__name__)

_DETAILS = {
    "created": "Post Created: {name}",
    "updated": "Post Updated: {name}",
    "renamed": "Post Updated: {name}",
    "deleted": "Post Deleted: {name}",
    "skipped": "Post Not Found",
}


def check_token(payload: object, expected: str) -> None:
    """Raise Unauthorized unless payload carries metadata.token == expected."""
    token = None
    if isinstance(payload, dict) and isinstance(payload.get("metadata"), dict):
        token = payload["metadata"].get("token")
    if not isinstance(token, str) or not hmac.compare_digest(
        token.encode(), expected.encode()
    ):
        raise Unauthorized("invalid webhook token")


def describe(result: DispatchResult) -> str:
    return _DETAILS[result.action].format(name=result.name)


def create_app(dispatcher: ChangeDispatcher, webhook_token: str) -> FastAPI:
    app = FastAPI(title="postsync")
    app.state.dispatcher = dispatcher

    @app.exception_handler(Unauthorized)
    async def _unauthorized(request: Request, exc: Unauthorized) -> JSONResponse:
        return JSONResponse(status_code=401, content={"details": "Invalid Request"})

    @app.exception_handler(StoreError)
    async def _store_failed(request: Request, exc: StoreError) -> JSONResponse:
        if isinstance(exc, (Conflict, StaleVersion)):
            logger.warning("version conflict: %s", exc)
            return JSONResponse(status_code=409, content={"details": str(exc)})
        logger.error("store failure: %s", exc)
        return JSONResponse(
            status_code=500, content={"details": "Failed to push changes to Github"}
        )

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500, content={"details": "Failed to push changes to Github"}
        )

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.post("/")
    async def webhook(request: Request):
        try:
            payload = await request.json()
        except ValueError:
            return JSONResponse(status_code=400, content={"details": "Invalid Request"})

        check_token(payload, webhook_token)

        try:
            event = WebhookEvent.model_validate(payload)
        except ValidationError as e:
            return JSONResponse(
                status_code=422,
                content={
                    "details": "Invalid Request",
                    "errors": e.errors(
                        include_url=False, include_context=False, include_input=False
                    ),
                },
            )

        result = await request.app.state.dispatcher.dispatch(event)
        return {"details": describe(result)}

    @app.api_route(
        "/{path:path}",
        methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    )
    async def catch_all(path: str):
        return JSONResponse(status_code=400, content={"details": "Invalid Request"})

    return app


def build_app(config: PostsyncConfig) -> FastAPI:
    """Wire the store, dispatcher and app from config. Resolves secrets from env."""
    webhook_token = resolve_secret(config.webhook.token_env)
    store = create_store(config.github)
    dispatcher = ChangeDispatcher(store, file_extension=config.github.file_extension)
    return create_app(dispatcher, webhook_token)
