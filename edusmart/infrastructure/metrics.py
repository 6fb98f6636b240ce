from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# HTTP traffic
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

# Cache
cache_hits_total = Counter('cache_hits_total', 'Total cache hits')
cache_misses_total = Counter('cache_misses_total', 'Total cache misses')

# Business events
enrollments_total = Counter(
    'enrollments_total',
    'Enrollment attempts by outcome',
    ['result']
)
checkins_total = Counter(
    'checkins_total',
    'Check-in attempts by outcome',
    ['result']
)
tokens_debited_total = Counter('tokens_debited_total', 'Tokens debited from learner wallets')
registrations_total = Counter('registrations_total', 'Accounts created', ['role'])

def metrics_endpoint():
    """Prometheus metrics endpoint"""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
