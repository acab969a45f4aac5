"""Entry point: python -m rpc_starter

Serves the API with uvicorn on the host/port from settings.
"""

import uvicorn

from rpc_starter.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "rpc_starter.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
