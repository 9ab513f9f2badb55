"""build_rag_context: MCP tool and ``POST /build-rag-context`` HTTP route."""

import logging
from typing import TYPE_CHECKING, Annotated, Any

from fastmcp import FastMCP
from fastmcp.server.context import Context
from pydantic import Field
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response

from figmant_rag.context.builder import handle_build_request
from figmant_rag.context.envelope import error_envelope
from figmant_rag.errors import FigmantError

if TYPE_CHECKING:
    from figmant_rag.server import Runtime

logger = logging.getLogger(__name__)

ROUTE_PATH = "/build-rag-context"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


async def handle_http_request(runtime: "Runtime", request: Request) -> Response:
    """Decode the body, build the context and wrap the result with CORS headers."""
    if request.method == "OPTIONS":
        return PlainTextResponse("ok", headers=CORS_HEADERS)

    try:
        payload = await request.json()
    except ValueError:
        return JSONResponse(
            error_envelope("Request body is not valid JSON"), status_code=400, headers=CORS_HEADERS
        )

    try:
        builder = await runtime.start()
    except FigmantError as exc:
        logger.error("Cannot start RAG runtime: %s", exc)
        return JSONResponse(error_envelope(str(exc)), status_code=500, headers=CORS_HEADERS)
    except Exception as exc:
        logger.exception("Unexpected error starting RAG runtime")
        message = str(exc) or exc.__class__.__name__
        return JSONResponse(error_envelope(message), status_code=500, headers=CORS_HEADERS)

    status, body = await handle_build_request(builder, payload)
    return JSONResponse(body, status_code=status, headers=CORS_HEADERS)


def register_build_rag_context(mcp: FastMCP, runtime: "Runtime") -> None:
    """Register the build_rag_context tool and HTTP route with the server."""

    @mcp.custom_route(ROUTE_PATH, methods=["POST", "OPTIONS"])
    async def build_rag_context_route(request: Request) -> Response:
        return await handle_http_request(runtime, request)

    @mcp.tool()
    async def build_rag_context(
        user_prompt: Annotated[
            str, Field(description="The user's analysis request (may be empty)")
        ] = "",
        image_urls: Annotated[
            list[str] | None, Field(description="URLs of the screenshots being analyzed")
        ] = None,
        image_annotations: Annotated[
            list[Any] | None, Field(description="Existing annotations on the screenshots")
        ] = None,
        analysis_id: Annotated[str | None, Field(description="Analysis identifier")] = None,
        ctx: Context | None = None,
    ) -> dict[str, Any]:
        """Retrieve UX research relevant to a design review and compose an LLM prompt.

        Returns the ranked knowledge entries split into relevant patterns and
        competitor insights, one citation per entry, the inferred industry and
        the research-enhanced prompt. On failure returns the same shape with
        empty fields and an ``error`` message.
        """
        if ctx is None:
            raise RuntimeError("Context not injected")
        builder = ctx.lifespan_context.get("builder")
        _status, body = await handle_build_request(
            builder,
            {
                "userPrompt": user_prompt,
                "imageUrls": image_urls or [],
                "imageAnnotations": image_annotations or [],
                "analysisId": analysis_id,
            },
        )
        return body
