#!/usr/bin/env python3
"""Entry point for the device telemetry status server"""
import sys
import uvicorn
from config import Config
from app.server import TelemetryServer
from logging_config import setup_structured_logging, get_logger, log_server_startup, log_error


def main():
    """Detect capabilities once, then serve readings until interrupted"""
    logger = None
    try:
        config = Config()
        setup_structured_logging(config)
        logger = get_logger(__name__)
        log_server_startup(logger, config)

        server = TelemetryServer(config)
        # Warm the profile cache so the first request does not pay for the benchmark
        server.runtime.detect()

        uvicorn.run(
            server.get_app(),
            host=config.http_host,
            port=config.http_port,
            log_config=None
        )

    except Exception as e:
        log_error(logger or get_logger(__name__), e, {"component": "main", "phase": "startup"})
        sys.exit(1)


if __name__ == '__main__':
    main()
