import os

bind = f"0.0.0.0:{os.getenv('PORT', '8080')}"
worker_class = "uvicorn.workers.UvicornWorker"

# jobs, caches and rate-limit windows live in process memory: keep one worker
# unless an external store is wired in
workers = int(os.getenv("WEB_CONCURRENCY", "1"))
threads = 4
timeout = 900             # a multi-platform job can run several generations
graceful_timeout = 120
keepalive = 75

# recycle workers to bound memory growth
max_requests = int(os.getenv("MAX_REQUESTS", "1000"))
max_requests_jitter = int(os.getenv("MAX_REQUESTS_JITTER", "100"))

# stdout/stderr, picked up by Cloud Run
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
