"""Canonical logging field names shared by every catalog component."""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"
EVENT = "event"

# Result/correlation fields.
TRACE_ID = "trace_id"
ENVELOPE_ID = "envelope_id"
SOURCE = "source"
PRINCIPAL = "principal"

# Public API invocation fields.
COMPONENT_ID = "component_id"
API_NAME = "api_name"
PUBLIC_API_INVOCATION_EVENT = "public_api_invocation"
PUBLIC_API_COMPLETION_EVENT = "public_api_completion"
PUBLIC_API_INSTRUMENTATION_FAILURE_EVENT = "public_api_instrumentation_failure"
SUCCESS = "success"
DURATION_MS = "duration_ms"
ERRORS = "errors"
ERROR_CATEGORY = "error_category"
ERROR_CATEGORIES = "error_categories"
STAGE = "stage"
CONCERN = "concern"

# Category cache fields.
OPERATION = "operation"
READ_TICKET = "read_ticket"
RECORD_COUNT = "record_count"
LISTENER = "listener"

# Common service-level fields.
SERVICE = "service"
ENVIRONMENT = "environment"
