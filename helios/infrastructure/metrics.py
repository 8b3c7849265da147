from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Метрики для HTTP запросов
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint']
)

# Решения route guard
route_guard_decisions_total = Counter(
    'route_guard_decisions_total',
    'Route guard decisions',
    ['decision', 'target']
)

# Операции над сессией
session_operations_total = Counter(
    'session_operations_total',
    'Session store operations',
    ['operation', 'outcome']
)

def metrics_endpoint():
    """Endpoint для Prometheus метрик"""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
