from prometheus_client import Counter, Histogram, REGISTRY

from assistant_ai.models import ActionType, AssistantResponse, JobRun
from interpretation.response_interpreter import Tier


# we check if they are already registered to avoid errors during hot reloads or test runs
def get_or_create_metric(name, documentation, metric_type, **kwargs):
    try:
        return metric_type(name, documentation, **kwargs)
    except ValueError:
        return REGISTRY._names_to_collectors[name]


REQUESTS_TOTAL = get_or_create_metric(
    "assistant_requests_total",
    "Assistant requests by resolved intent and interpretation tier",
    Counter,
    labelnames=["intent", "tier"],
)

REQUEST_LATENCY_SECONDS = get_or_create_metric(
    "assistant_request_latency_seconds",
    "Assistant request latency",
    Histogram,
)

JOB_RUNS_TOTAL = get_or_create_metric(
    "automation_job_runs_total",
    "Proactive job runs",
    Counter,
    labelnames=["job", "status"],
)

NOTIFICATIONS_TOTAL = get_or_create_metric(
    "automation_notifications_total",
    "Notifications dispatched by proactive jobs",
    Counter,
    labelnames=["job"],
)


# Model-supplied intents are free text; anything outside this set shares one series.
KNOWN_INTENTS = frozenset(t.value for t in ActionType) | {"general"}


def intent_label(intent: str) -> str:
    return intent if intent in KNOWN_INTENTS else "other"


def record_response(response: AssistantResponse, tier: Tier, elapsed_s: float) -> None:
    REQUESTS_TOTAL.labels(intent=intent_label(response.intent), tier=tier.value).inc()
    REQUEST_LATENCY_SECONDS.observe(elapsed_s)


def record_job_run(run: JobRun) -> None:
    JOB_RUNS_TOTAL.labels(job=run.job, status=run.status).inc()
    if run.dispatched:
        NOTIFICATIONS_TOTAL.labels(job=run.job).inc(run.dispatched)
