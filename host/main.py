"""
Main entry point for the relay process.
Loads configuration, wires the RelayEngine, RelayEventLoop and Socket.IO server
together and runs until interrupted.
"""

import logging
import asyncio
import os
import sys

# Basic logging until we load configuration
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

from host.config import load_settings
from host.event_loop import RelayEventLoop
from host.observability import setup_tracing, shutdown_tracing
from host.modules.relay.relay_engine import RelayEngine
from host.modules.relay.socket_server import RelaySocketServer


def configure_logging(log_level: str = "INFO", log_format: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                      log_to_file: bool = False, log_file_path: str = "logs/relay.log",
                      max_lines_per_file: int = 5000, max_log_files: int = 10):
    """
    Configure logging with the specified level, format, and optional rolling file logging.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log message format string
        log_to_file: Whether to enable file logging
        log_file_path: Path to log file (directory will be created if needed)
        max_lines_per_file: Maximum lines per log file before rotation
        max_log_files: Maximum number of log files to keep
    """
    try:
        numeric_level = getattr(logging, log_level.upper())

        # Clear existing handlers and reconfigure
        root_logger = logging.getLogger()
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        formatter = logging.Formatter(log_format)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        if log_to_file:
            try:
                from logging.handlers import RotatingFileHandler

                log_dir = os.path.dirname(log_file_path)
                if log_dir and not os.path.exists(log_dir):
                    os.makedirs(log_dir, exist_ok=True)

                # Estimate ~100 characters per log line on average
                estimated_chars_per_line = 100
                max_bytes = max_lines_per_file * estimated_chars_per_line

                file_handler = RotatingFileHandler(
                    filename=log_file_path,
                    maxBytes=max_bytes,
                    backupCount=max_log_files - 1,  # current file + backups = total
                    encoding='utf-8'
                )
                file_handler.setLevel(numeric_level)
                file_handler.setFormatter(formatter)
                root_logger.addHandler(file_handler)

            except OSError as file_error:
                logger.warning(f"Failed to setup file logging: {file_error}. Continuing with console logging only.")

        root_logger.setLevel(numeric_level)
        logger.info(f"Logging configured: level={log_level.upper()}, file={log_file_path if log_to_file else 'disabled'}")

    except AttributeError:
        logger.error(f"Invalid log level: {log_level}. Using INFO instead.")
        logging.basicConfig(level=logging.INFO, format=log_format, force=True)


async def amain():
    """Asynchronous main entry point."""
    settings = load_settings()

    configure_logging(
        log_level=settings.log_level,
        log_format=settings.log_format,
        log_to_file=settings.log_to_file,
        log_file_path=settings.log_file_path,
        max_lines_per_file=settings.log_max_lines_per_file,
        max_log_files=settings.log_max_files
    )

    telemetry_providers = None
    if settings.tracing_enabled:
        telemetry_providers = setup_tracing(settings.tracing_service_name)

    engine = RelayEngine(scope_errors_to_requester=settings.scope_errors_to_requester)
    event_loop = RelayEventLoop(
        engine=engine,
        log_verbose=settings.log_verbose,
        truncate_length=settings.log_truncate_length
    )
    server = RelaySocketServer(
        event_loop=event_loop,
        host=settings.host,
        port=settings.socket_port,
        producer_namespace=settings.producer_namespace,
        consumer_namespace=settings.consumer_namespace,
        cors_allowed_origins=settings.cors_allowed_origins
    )
    event_loop.transport = server

    try:
        await server.start()
        logger.info("Starting Relay Event Loop...")
        await event_loop.run()
    except asyncio.CancelledError:
        logger.info("Relay cancelled. Initiating shutdown...")
    finally:
        logger.info("Relay process shutting down...")
        event_loop.stop()
        await server.stop()
        if telemetry_providers:
            shutdown_tracing(telemetry_providers)
        logger.info("Shutdown sequence complete.")


def main():
    """Synchronous entry point."""
    try:
        asyncio.run(amain())
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received. Relay stopped.")
    except Exception as e:
        logger.critical(f"Critical error during relay execution: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
