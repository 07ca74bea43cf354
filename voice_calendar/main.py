"""Main entry point for the voice calendar assistant."""

import asyncio
import logging
import sys

from .agent.orchestrator import ToolSessionOrchestrator
from .config.config_loader import load_config
from .errors import ConfigurationError
from .llm.openai_llm import OpenAILLM
from .tools.registry import ToolRegistry
from .utils.logging import VERBOSITY_FLAGS, parse_verbosity, setup_logging
from .web.server import CalendarAssistantServer

logger = logging.getLogger(__name__)


async def main():
    """Main entry point."""
    setup_logging(verbosity=parse_verbosity(sys.argv))

    logger.info("=" * 60)
    logger.info("Voice Calendar Assistant - Starting")
    logger.info("=" * 60)

    args = [arg for arg in sys.argv[1:] if arg not in VERBOSITY_FLAGS]
    config_path = args[0] if args else "config.yaml"
    logger.info(f"[1/4] Loading configuration from: {config_path}")

    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        logger.error(f"✗ Failed to load configuration: {e}")
        sys.exit(1)
    logger.info("✓ Configuration loaded successfully")

    logger.info("[2/4] Initializing chat endpoint client")
    llm = OpenAILLM(
        base_url=config.orchestrator.chat_endpoint_url,
        model=config.orchestrator.model,
        api_key=config.llm.api_key,
        transcription_model=config.llm.transcription_model,
        timeout=config.llm.timeout_seconds,
    )
    logger.info(f"  Endpoint: {config.orchestrator.chat_endpoint_url}")
    logger.info(f"✓ Chat client ready: {llm.get_model_name()}")

    registry = None
    logger.info("[3/4] Initializing tools")
    if config.server.serve_tools:
        registry = ToolRegistry()
        registry.initialize_tools(config)
        for tool in registry.get_all_tools():
            logger.info(f"    - {tool.get_name()}: {tool.get_description()[:60]}")
        logger.info("✓ Tools ready")
    else:
        logger.info("  Tool server not served here, using remote tool server")

    logger.info("[4/4] Initializing orchestrator")
    orchestrator = ToolSessionOrchestrator(config=config.orchestrator, llm=llm)
    logger.info(f"  Tool server: {config.orchestrator.tool_server_url}")
    logger.info(f"  Max rounds: {config.orchestrator.max_rounds}")
    logger.info("✓ Orchestrator ready")

    server = CalendarAssistantServer(
        orchestrator=orchestrator,
        llm=llm,
        server_config=config.server,
        registry=registry,
    )

    logger.info("=" * 60)
    logger.info(f"✓ SYSTEM READY - listening on {server.get_url()}")
    logger.info("=" * 60)
    try:
        await server.start()
    finally:
        await server.stop()
        logger.info("✓ Voice Calendar Assistant shutdown complete")


if __name__ == "__main__":
    asyncio.run(main())
