# masjid_site/metrics.py

from prometheus_client import Counter, Histogram

# Cache Metrics
CACHE_HITS = Counter('masjid_site_cache_hits_total', 'Total cache hits', ['cache_type'])
CACHE_MISSES = Counter('masjid_site_cache_misses_total', 'Total cache misses', ['cache_type'])

# Upstream prayer-time API Metrics
API_REQUESTS_TOTAL = Counter('masjid_site_api_requests_total', 'Total upstream prayer API requests', ['adapter_name', 'endpoint', 'status'])
API_REQUEST_DURATION_SECONDS = Histogram('masjid_site_api_request_duration_seconds', 'Upstream prayer API request duration in seconds', ['adapter_name', 'endpoint'])

# Content API Metrics
CONTENT_API_REQUESTS_TOTAL = Counter('masjid_site_content_api_requests_total', 'Total content API requests', ['method', 'resource', 'status'])
CONTENT_API_REQUEST_DURATION_SECONDS = Histogram('masjid_site_content_api_request_duration_seconds', 'Content API request duration in seconds', ['method', 'resource'])

# Admin mutation outcomes
ADMIN_MUTATIONS_TOTAL = Counter('masjid_site_admin_mutations_total', 'Admin mutations by kind, action and result', ['kind', 'action', 'result'])
