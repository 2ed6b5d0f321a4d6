"""Observability setup for OpenTelemetry, metrics, and structured logging."""

import logging

import structlog
from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest

from .config import settings

SERVICE_NAME = "arah-umroh-api"
SERVICE_VERSION = "1.0.0"

# Prometheus metrics
REGISTRY = CollectorRegistry()

# Request metrics
REQUEST_COUNT = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status_code'],
    registry=REGISTRY
)

REQUEST_DURATION = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    registry=REGISTRY
)

# Business metrics
BOOKINGS_CREATED = Counter(
    'bookings_created_total',
    'Total pilgrim bookings created',
    ['package_type'],
    registry=REGISTRY
)

BOOKING_PAYMENTS_RECORDED = Counter(
    'booking_payments_recorded_total',
    'Total booking payment schedule entries marked as paid',
    ['payment_type'],
    registry=REGISTRY
)

CREDITS_PURCHASED = Counter(
    'credits_purchased_total',
    'Credits added to travel balances by approved purchases and bonuses',
    ['transaction_type'],
    registry=REGISTRY
)

CREDITS_SPENT = Counter(
    'credits_spent_total',
    'Credits deducted from travel balances',
    registry=REGISTRY
)

FEATURED_PURCHASED = Counter(
    'featured_packages_purchased_total',
    'Featured placements purchased',
    ['position'],
    registry=REGISTRY
)

FEATURED_EXPIRED = Counter(
    'featured_packages_expired_total',
    'Featured placements expired by the sweeper',
    registry=REGISTRY
)

FEATURED_ACTIVE = Gauge(
    'featured_packages_active',
    'Active featured placements per position',
    ['position'],
    registry=REGISTRY
)

PAYMENT_REMINDERS_SENT = Counter(
    'payment_reminders_sent_total',
    'Payment reminder notifications written',
    ['reminder_type'],
    registry=REGISTRY
)

SHOP_ORDERS_CREATED = Counter(
    'shop_orders_created_total',
    'Shop orders created',
    registry=REGISTRY
)

INQUIRIES_CREATED = Counter(
    'package_inquiries_created_total',
    'Package inquiries submitted',
    registry=REGISTRY
)

DEPARTURE_REMINDERS_SENT = Counter(
    'departure_reminders_sent_total',
    'Departure countdown reminders written',
    ['reminder_type'],
    registry=REGISTRY
)

AGENT_NOTIFICATIONS_CREATED = Counter(
    'agent_notifications_created_total',
    'Notifications written for travel agents',
    ['notification_type'],
    registry=REGISTRY
)


def setup_structured_logging():
    """Configure structured logging with structlog."""

    def add_trace_context(logger, method_name, event_dict):
        """Add trace context to log events."""
        span = trace.get_current_span()
        if span and span.is_recording():
            ctx = span.get_span_context()
            event_dict['trace_id'] = format(ctx.trace_id, '032x')
            event_dict['span_id'] = format(ctx.span_id, '016x')
        return event_dict

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_trace_context,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level)
        ),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _resource(app_name: str) -> Resource:
    return Resource.create({
        "service.name": app_name,
        "service.version": SERVICE_VERSION,
        "environment": settings.environment,
    })


def setup_tracing(app_name: str = SERVICE_NAME):
    """Setup OpenTelemetry tracing."""
    trace.set_tracer_provider(TracerProvider(resource=_resource(app_name)))

    if settings.otlp_endpoint:
        otlp_exporter = OTLPSpanExporter(endpoint=settings.otlp_endpoint)
        span_processor = BatchSpanProcessor(otlp_exporter)
        trace.get_tracer_provider().add_span_processor(span_processor)

    return trace.get_tracer(__name__)


def setup_metrics(app_name: str = SERVICE_NAME):
    """Setup OpenTelemetry metrics."""
    if settings.otlp_endpoint:
        otlp_exporter = OTLPMetricExporter(endpoint=settings.otlp_endpoint)
        reader = PeriodicExportingMetricReader(exporter=otlp_exporter, export_interval_millis=60000)
        metrics.set_meter_provider(MeterProvider(resource=_resource(app_name), metric_readers=[reader]))

    return metrics.get_meter(__name__)


def instrument_fastapi(app):
    """Instrument FastAPI with OpenTelemetry."""
    FastAPIInstrumentor.instrument_app(app)


def instrument_sqlalchemy(engine=None):
    """Instrument SQLAlchemy with OpenTelemetry."""
    if engine is not None:
        SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)
    else:
        SQLAlchemyInstrumentor().instrument()


class MetricsCollector:
    """Collector for business metrics."""

    @staticmethod
    def record_request(method: str, endpoint: str, status_code: int, duration_seconds: float):
        """Record one HTTP request."""
        REQUEST_COUNT.labels(method=method, endpoint=endpoint, status_code=str(status_code)).inc()
        REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(duration_seconds)

    @staticmethod
    def record_booking_created(package_type: str):
        BOOKINGS_CREATED.labels(package_type=package_type).inc()

    @staticmethod
    def record_payment_recorded(payment_type: str):
        BOOKING_PAYMENTS_RECORDED.labels(payment_type=payment_type).inc()

    @staticmethod
    def record_credits_added(transaction_type: str, amount: int):
        CREDITS_PURCHASED.labels(transaction_type=transaction_type).inc(amount)

    @staticmethod
    def record_credits_spent(amount: int):
        CREDITS_SPENT.inc(amount)

    @staticmethod
    def record_featured_purchased(position: str):
        FEATURED_PURCHASED.labels(position=position).inc()

    @staticmethod
    def record_featured_expired(count: int):
        FEATURED_EXPIRED.inc(count)

    @staticmethod
    def set_featured_active(position: str, count: int):
        FEATURED_ACTIVE.labels(position=position).set(count)

    @staticmethod
    def record_payment_reminder(reminder_type: str):
        PAYMENT_REMINDERS_SENT.labels(reminder_type=reminder_type).inc()

    @staticmethod
    def record_departure_reminder(reminder_type: str):
        DEPARTURE_REMINDERS_SENT.labels(reminder_type=reminder_type).inc()

    @staticmethod
    def record_agent_notification(notification_type: str):
        AGENT_NOTIFICATIONS_CREATED.labels(notification_type=notification_type).inc()

    @staticmethod
    def record_shop_order_created():
        SHOP_ORDERS_CREATED.inc()

    @staticmethod
    def record_inquiry_created():
        INQUIRIES_CREATED.inc()


def get_prometheus_metrics():
    """Get Prometheus metrics for the /metrics endpoint."""
    return generate_latest(REGISTRY)


# Global metrics collector instance
metrics_collector = MetricsCollector()
