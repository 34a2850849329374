#!/usr/bin/env python3
"""
Dockmon - Docker Log Monitor

Serves the log monitor UI, the container listing API and the live log
WebSocket.
"""

import uvicorn

from dockmon.config import config


def main():
    """Main entry point for the Dockmon service."""
    uvicorn.run(
        "dockmon.app:app",
        host=config.server.host,
        port=config.server.port,
        log_level=config.server.log_level,
        access_log=config.server.access_log
    )


if __name__ == "__main__":
    main()
