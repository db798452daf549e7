from __future__ import annotations

import anyio
import uvicorn

from pipedrive_mcp.core.config import create_session_from_env, load_env_config
from pipedrive_mcp.core.logging import install_process_handlers, setup_logging

from .app import build_http_app
from .config import HttpConfig


async def main() -> None:
    gateway_cfg = load_env_config(use_dotenv=True)
    setup_logging(gateway_cfg.effective_log_level, log_dir=gateway_cfg.log_dir)
    install_process_handlers()
    session = create_session_from_env(gateway_cfg)

    cfg = HttpConfig.from_env()
    app = build_http_app(session, cfg)
    server = uvicorn.Server(
        uvicorn.Config(
            app,
            host=cfg.host,
            port=cfg.port,
            log_config=None,
            lifespan="on",
        )
    )
    await server.serve()


def run() -> None:
    anyio.run(main)


if __name__ == "__main__":
    run()
