"""HTTP service exposing the synthesis engine as an OpenAI-compatible API."""
from __future__ import annotations

import asyncio
import json
import time
from typing import Any, Dict, Mapping, Optional, Union

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from synthesis.clients import SynthesisClient, SyntheticClient
from synthesis.models import EmbeddingResponse, GenerationResponse, SynthesisRequest
from utils.config import ServerConfig
from utils.logging import get_logger

from . import __version__
from .auth import require_api_key
from .errors import RequestTimeoutError, RequestValidationError, ServiceError, error_body
from .schemas import (
    ChatCompletionRequestSchema,
    CompletionRequestSchema,
    EmbeddingRequestSchema,
)

logger = get_logger(__name__)

SERVICE_NAME = "openai-synth"
ENDPOINTS = ("/v1/completions", "/v1/chat/completions", "/v1/embeddings")
MODEL_CREATED = 1677610602
LISTED_MODELS = ("text-davinci-003", "gpt-3.5-turbo", "gpt-4", "text-embedding-ada-002")


def get_client(request: Request) -> SynthesisClient:
    """Engine client shared by every request of an application instance."""

    return request.app.state.client


async def _json_body(request: Request) -> Mapping[str, Any]:
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise RequestValidationError("We could not parse the JSON body of your request.") from exc
    if not isinstance(payload, dict):
        raise RequestValidationError("The request body must be a JSON object.")
    return payload


async def _respond(
    request: Request,
    client: SynthesisClient,
    engine_request: SynthesisRequest,
) -> Union[GenerationResponse, EmbeddingResponse]:
    """Run ``client.respond`` on the default executor, bounded by the request timeout.

    An executor future is cancelled as soon as the deadline passes; the worker
    thread finishes in the background and its result is discarded.
    """
    timeout = float(request.app.state.config.request_timeout_secs)
    loop = asyncio.get_running_loop()
    try:
        return await asyncio.wait_for(
            loop.run_in_executor(None, client.respond, engine_request), timeout=timeout
        )
    except asyncio.TimeoutError as exc:
        logger.warning("Request %s %s timed out after %ss", request.method, request.url.path, timeout)
        raise RequestTimeoutError("Request timed out") from exc


def _build_v1_router(api_key: str) -> APIRouter:
    router = APIRouter(prefix="/v1", dependencies=[Depends(require_api_key(api_key))])

    @router.post("/completions")
    async def create_completion(
        request: Request,
        client: SynthesisClient = Depends(get_client),  # noqa: B008 - FastAPI dependency injection
    ) -> Dict[str, Any]:
        schema = CompletionRequestSchema.from_dict(await _json_body(request))
        return (await _respond(request, client, schema.to_request())).to_dict()

    @router.post("/chat/completions")
    async def create_chat_completion(
        request: Request,
        client: SynthesisClient = Depends(get_client),  # noqa: B008 - FastAPI dependency injection
    ) -> Dict[str, Any]:
        schema = ChatCompletionRequestSchema.from_dict(await _json_body(request))
        return (await _respond(request, client, schema.to_request())).to_dict()

    @router.post("/embeddings")
    async def create_embedding(
        request: Request,
        client: SynthesisClient = Depends(get_client),  # noqa: B008 - FastAPI dependency injection
    ) -> Dict[str, Any]:
        schema = EmbeddingRequestSchema.from_dict(await _json_body(request))
        return (await _respond(request, client, schema.to_request())).to_dict()

    return router


def _install_middleware(app: FastAPI, config: ServerConfig) -> None:
    # Each middleware added wraps the ones added before it.

    @app.middleware("http")
    async def catch_unexpected(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            return JSONResponse(
                status_code=500,
                content=error_body(
                    "Internal server error occurred while processing the request", "server_error"
                ),
            )

    if config.enable_logging:

        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            start = time.perf_counter()
            response = await call_next(request)
            logger.info(
                "method=%s path=%s status=%s latency_ms=%.2f",
                request.method,
                request.url.path,
                response.status_code,
                (time.perf_counter() - start) * 1000,
            )
            return response

    # Outermost, so 4xx, 5xx and timeout bodies all carry CORS headers.
    if config.enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["content-type", "authorization", "x-api-key"],
            max_age=86400,
        )


def _install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status, content=exc.to_dict())


def create_app(
    config: Optional[ServerConfig] = None,
    client: Optional[SynthesisClient] = None,
) -> FastAPI:
    """Build the FastAPI application for ``config``."""

    config = config or ServerConfig()
    app = FastAPI(title="OpenAI Synthetic Service", version=__version__)
    app.state.config = config
    app.state.client = client or SyntheticClient()

    @app.get("/")
    async def root() -> Dict[str, Any]:
        return {
            "message": "OpenAI Synthetic API Server",
            "version": __version__,
            "endpoints": {
                "completions": "/v1/completions",
                "chat_completions": "/v1/chat/completions",
                "embeddings": "/v1/embeddings",
                "health": "/health",
            },
            "authentication": {"type": "Bearer", "header": "Authorization"},
        }

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": __version__,
            "endpoints": list(ENDPOINTS),
        }

    @app.get("/v1/models")
    async def list_models() -> Dict[str, Any]:
        return {
            "object": "list",
            "data": [
                {
                    "id": model,
                    "object": "model",
                    "created": MODEL_CREATED,
                    "owned_by": "openai",
                    "permission": [],
                    "root": model,
                    "parent": None,
                }
                for model in LISTED_MODELS
            ],
        }

    app.include_router(_build_v1_router(config.api_key))
    _install_exception_handlers(app)
    _install_middleware(app, config)
    return app
