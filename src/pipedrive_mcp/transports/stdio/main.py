from __future__ import annotations

import anyio

from pipedrive_mcp.core.config import create_session_from_env, load_env_config
from pipedrive_mcp.core.logging import install_process_handlers, setup_logging
from pipedrive_mcp.server import build_mcp_server


async def main() -> None:
    cfg = load_env_config(use_dotenv=True)
    setup_logging(cfg.effective_log_level, log_dir=cfg.log_dir)
    install_process_handlers()
    session = create_session_from_env(cfg)

    app = build_mcp_server(session)
    try:
        await app.run_stdio_async()
    finally:
        await session.aclose()


def run() -> None:
    anyio.run(main)


if __name__ == "__main__":
    run()
