"""Server entry point: ``python -m medprompt.core.server.main``."""

from __future__ import annotations

import logging
from ipaddress import ip_address

from medprompt.core.config.settings import get_settings
from medprompt.core.server.app import create_app


def _is_loopback_host(host: str) -> bool:
    if host in {"localhost"}:
        return True
    try:
        return ip_address(host).is_loopback
    except ValueError:
        return False


def run() -> None:
    """Start the prompt builder MCP server with Streamable HTTP transport."""
    settings = get_settings()
    logging.basicConfig(level=getattr(logging, settings.medprompt_log_level.upper(), logging.INFO))

    logger = logging.getLogger(__name__)
    if not settings.medprompt_allow_insecure_bind and not _is_loopback_host(settings.medprompt_host):
        raise RuntimeError(
            "Refusing to bind the prompt builder server to a non-loopback host without an "
            "auth layer. Set MEDPROMPT_ALLOW_INSECURE_BIND=true to override (unsafe)."
        )
    logger.info(
        "Starting prompt builder server on %s:%d",
        settings.medprompt_host,
        settings.medprompt_port,
    )

    mcp = create_app(settings_override=settings)
    mcp.run(
        transport="streamable-http",
        host=settings.medprompt_host,
        port=settings.medprompt_port,
    )


if __name__ == "__main__":
    run()
