"""FastAPI application: voice/text prompt endpoint and MCP tool server."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse
from starlette.routing import Route

from .. import __version__
from ..agent.orchestrator import ToolSessionOrchestrator
from ..config.config_schema import ServerConfig
from ..errors import TranscriptionError, VoiceCalendarError
from ..llm.base import BaseLLM
from ..mcp_server.server import StreamableHTTPEndpoint, create_mcp_server, create_session_manager
from ..tools.registry import ToolRegistry
from .transcription import compose_prompt, transcribe_audio

logger = logging.getLogger(__name__)


class CalendarAssistantServer:
    """HTTP server for the calendar assistant.

    Serves the prompt endpoint and, when a tool registry is given, the MCP
    tool server that the orchestrator talks to.
    """

    def __init__(
        self,
        orchestrator: ToolSessionOrchestrator,
        llm: BaseLLM,
        server_config: Optional[ServerConfig] = None,
        registry: Optional[ToolRegistry] = None,
    ):
        self.orchestrator = orchestrator
        self.llm = llm
        self.config = server_config or ServerConfig()
        self.registry = registry
        self.session_manager = None
        self._server: Optional[uvicorn.Server] = None

        if registry is not None:
            self.session_manager = create_session_manager(create_mcp_server(registry))

        self.app = FastAPI(
            title="Voice Calendar Assistant",
            version=__version__,
            lifespan=self._lifespan,
        )
        self._setup_routes()
        self._setup_error_handlers()

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        if self.session_manager is None:
            yield
            return
        async with self.session_manager.run():
            logger.info("MCP tool server mounted at /mcp")
            yield

    def _setup_routes(self):
        """Configure FastAPI routes."""

        @self.app.get("/health")
        async def health():
            """Liveness check."""
            return {
                "status": "ok",
                "model": self.llm.get_model_name(),
                "tools_mounted": self.session_manager is not None,
            }

        @self.app.post("/api/v1/mcp-client")
        async def post_mcp_client(
            prompt: str = Form(default=""),
            audio: Optional[UploadFile] = File(default=None),
        ):
            """Answer a typed and/or spoken prompt."""
            if audio is not None:
                if not (audio.content_type or "").startswith("audio/"):
                    raise HTTPException(status_code=400, detail="Only audio files are allowed")

                data = await audio.read(self.config.max_upload_bytes + 1)
                if len(data) > self.config.max_upload_bytes:
                    raise HTTPException(status_code=413, detail="Audio file is too large")

                transcript = await transcribe_audio(self.llm, data, audio.filename or "audio")
                prompt = compose_prompt(prompt, transcript)

            if not prompt or not prompt.strip():
                raise HTTPException(status_code=400, detail="A prompt or an audio file is required")

            result = await self.orchestrator.run(prompt)
            return {"answer": result.answer, "toolCalls": result.tool_call_count}

        if self.session_manager is not None:
            self.app.router.routes.append(
                Route("/mcp", endpoint=StreamableHTTPEndpoint(self.session_manager))
            )

    def _setup_error_handlers(self):
        """Translate core failures into HTTP responses."""

        @self.app.exception_handler(TranscriptionError)
        async def transcription_error(request: Request, exc: TranscriptionError):
            logger.error(f"Audio transcription error: {exc}")
            return JSONResponse(status_code=500, content={"message": "Failed to transcribe audio"})

        @self.app.exception_handler(VoiceCalendarError)
        async def calendar_assistant_error(request: Request, exc: VoiceCalendarError):
            logger.error(f"Request failed on {request.url.path}: {exc}")
            return JSONResponse(status_code=502, content={"message": str(exc)})

    async def start(self) -> None:
        """Start the web server."""
        config = uvicorn.Config(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level="warning",
        )
        self._server = uvicorn.Server(config)
        await self._server.serve()

    async def stop(self) -> None:
        """Stop the web server."""
        if self._server:
            self._server.should_exit = True

    def get_url(self) -> str:
        """Get the base URL of the server."""
        return f"http://{self.config.host}:{self.config.port}"
