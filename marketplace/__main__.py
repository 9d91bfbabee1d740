"""Serve the bid service with uvicorn on the configured listen address."""

from __future__ import annotations

import uvicorn

from .config import get_server_config


def main() -> None:
    server_config = get_server_config()
    listen = server_config.listen
    uvicorn.run(
        "marketplace.main:app",
        host=str(listen.get("host", "127.0.0.1")),
        port=int(listen.get("port", 8080)),
        log_level=server_config.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
