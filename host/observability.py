import logging
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

# Log export
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.exporter.otlp.proto.http._log_exporter import OTLPLogExporter
from opentelemetry import _logs as logs

logger = logging.getLogger(__name__)


def setup_tracing(service_name: str = "inspector-relay"):
    """
    Initializes OpenTelemetry tracing with an OTLP exporter and logging instrumentation.

    Exporter endpoints are taken from the standard OTEL_EXPORTER_OTLP_* variables.
    """
    resource = Resource.create({"service.name": service_name})

    # --- Traces Setup ---
    trace_provider = TracerProvider(resource=resource)
    trace_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter()))
    trace.set_tracer_provider(trace_provider)

    # --- Logs Setup ---
    log_provider = LoggerProvider(resource=resource)
    log_provider.add_log_record_processor(BatchLogRecordProcessor(OTLPLogExporter()))
    logs.set_logger_provider(log_provider)

    # Attach the OTel handler to the root logger
    otel_handler = LoggingHandler(logger_provider=log_provider)
    logging.getLogger().addHandler(otel_handler)

    logger.info(f"OpenTelemetry tracing initialized for '{service_name}' with OTLP span and log exporters.")
    return trace_provider, log_provider


def shutdown_tracing(providers) -> None:
    """Flushes and shuts down the providers returned by setup_tracing()."""
    if not providers:
        return
    for provider in providers:
        try:
            provider.shutdown()
        except Exception as e:
            logger.warning(f"Error shutting down telemetry provider: {e}")


def get_tracer(name: str) -> trace.Tracer:
    """
    Returns a tracer with the specified name.

    Spans are no-ops until setup_tracing() has been run.
    """
    return trace.get_tracer(name)
