import logging
import os
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator

logger = logging.getLogger(__name__)

# Environment variable prefix
ENV_PREFIX = "RELAY_"

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class RelaySettings(BaseSettings):
    """Relay configuration loaded from environment variables and .env."""

    # Server Settings
    host: str = Field(default="0.0.0.0", description="Address the relay binds to")
    socket_port: int = Field(default=8000, ge=1, le=65535, description="Port for the Socket.IO server")
    producer_namespace: str = Field(default="/browsers", description="Socket.IO namespace for browser targets")
    consumer_namespace: str = Field(default="/apps", description="Socket.IO namespace for inspector apps")
    cors_allowed_origins: str = Field(default="*", description="'*' or a comma separated list of allowed origins")

    # Routing Settings
    scope_errors_to_requester: bool = Field(default=False,
                                            description="Send 'no available targets' errors only to the requesting app "
                                                        "instead of every connected app")

    # Logging Settings
    log_level: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)")
    log_format: str = Field(default='%(asctime)s - %(name)s - %(levelname)s - %(message)s', description="Logging format string")
    log_to_file: bool = Field(default=False, description="Enable logging to file with rotation")
    log_file_path: str = Field(default="logs/relay.log", description="Path to the log file (directory will be created)")
    log_max_lines_per_file: int = Field(default=5000, description="Maximum lines per log file before rotation")
    log_max_files: int = Field(default=10, description="Maximum number of log files to keep")
    log_verbose: bool = Field(default=False, description="Log relayed payloads in full")
    log_truncate_length: int = Field(default=100, ge=0, description="Characters of each relayed payload to log when not verbose")

    # Observability Settings
    tracing_enabled: bool = Field(default=False, description="Export traces and logs over OTLP")
    tracing_service_name: str = Field(default="inspector-relay", description="OpenTelemetry service.name")

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        env_prefix=ENV_PREFIX,
        extra='ignore',
        case_sensitive=False
    )

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(VALID_LOG_LEVELS)}, got '{value}'")
        return level

    @field_validator("producer_namespace", "consumer_namespace")
    @classmethod
    def _validate_namespace(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError(f"Socket.IO namespaces must start with '/', got '{value}'")
        return value


# Helper function to load settings
def load_settings() -> RelaySettings:
    logger.info(f"Loading relay configuration from .env file and environment variables (prefix: '{ENV_PREFIX}')...")
    logger.debug(f"Current working directory: {os.getcwd()}, .env file exists: {os.path.exists('.env')}")

    try:
        from dotenv import load_dotenv
        env_loaded = load_dotenv('.env', override=False)
        logger.debug(f"Manual .env loading result: {env_loaded}")
    except Exception as e:
        logger.warning(f"Failed to manually load .env file: {e}")

    relay_vars = sorted(k for k in os.environ if k.upper().startswith(ENV_PREFIX))
    logger.info(f"Found {len(relay_vars)} {ENV_PREFIX} environment variables: {relay_vars}")

    try:
        settings = RelaySettings()
        logger.info("Relay configuration loaded successfully.")
        if settings.producer_namespace == settings.consumer_namespace:
            raise ValueError("producer_namespace and consumer_namespace must differ")
        return settings
    except Exception as e:
        logger.exception(f"Critical error loading relay configuration: {e}")
        raise ValueError(f"Failed to load configuration: {e}") from e
