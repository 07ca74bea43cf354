"""Pydantic models for configuration validation."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..errors import ConfigurationError


class OrchestratorConfig(BaseModel):
    """Everything a tool session needs before it may start."""

    tool_server_url: str = Field(..., description="URL of the MCP tool server (streamable HTTP)")
    chat_endpoint_url: str = Field(
        ..., description="Base URL of the OpenAI-compatible chat endpoint (without /v1)"
    )
    model: str = Field(default="gpt-4o-mini", description="Chat model identifier")
    max_rounds: int = Field(default=5, ge=1, le=20, description="Maximum chat rounds per session")

    @field_validator("tool_server_url", "chat_endpoint_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Reject blank endpoint addresses."""
        v = v.strip()
        if not v:
            raise ValueError("Endpoint address must not be empty")
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Endpoint address must be an http(s) URL: '{v}'")
        return v.rstrip("/")


class LLMConfig(BaseModel):
    """Chat endpoint client configuration."""

    api_key: str = Field(
        default="not-needed", description="API key sent to the chat endpoint (proxies may ignore it)"
    )
    transcription_model: str = Field(default="whisper-1", description="Audio transcription model")
    timeout_seconds: float = Field(default=60.0, gt=0, description="Request timeout for chat calls")


class CalendarConfig(BaseModel):
    """CalDAV backend configuration."""

    url: str = Field(..., description="CalDAV server URL")
    username: Optional[str] = Field(default=None, description="CalDAV username")
    password: Optional[str] = Field(default=None, description="CalDAV password")
    calendar_url: Optional[str] = Field(
        default=None, description="Calendar collection URL (defaults to the first calendar)"
    )
    uid_domain: str = Field(default="example-domain.com", description="Domain suffix for event UIDs")


class ServerConfig(BaseModel):
    """HTTP server configuration."""

    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=3000, gt=0, lt=65536, description="Bind port")
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, gt=0, description="Audio upload limit")
    serve_tools: bool = Field(default=True, description="Mount the MCP tool server at /mcp")


class AppConfig(BaseModel):
    """Main application configuration."""

    orchestrator: OrchestratorConfig = Field(..., description="Tool session configuration")
    llm: LLMConfig = Field(default_factory=LLMConfig, description="Chat endpoint client configuration")
    calendar: Optional[CalendarConfig] = Field(default=None, description="CalDAV backend configuration")
    server: ServerConfig = Field(default_factory=ServerConfig, description="HTTP server configuration")

    def validate(self) -> None:
        """Validate configuration consistency."""
        if self.server.serve_tools and not self.calendar:
            raise ConfigurationError("calendar configuration is required when serve_tools is enabled")
