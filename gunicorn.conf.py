"""
Gunicorn configuration for the tutor selection API

Run with: gunicorn -c gunicorn.conf.py app.main:app
"""
import os

# Server socket
bind = f"{os.getenv('HOST', '0.0.0.0')}:{os.getenv('PORT', '8000')}"
backlog = 1024

# Worker processes
# Course locks are per process; the row lock on the course keeps workers consistent
workers = int(os.getenv("GUNICORN_WORKERS", 2))
worker_class = "uvicorn.workers.UvicornWorker"

# Worker lifecycle
max_requests = 2000
max_requests_jitter = 200

# Timeouts
# Must stay above OPERATION_TIMEOUT_SECONDS so engine timeouts answer before gunicorn kills the worker
timeout = int(os.getenv("GUNICORN_TIMEOUT", 30))
keepalive = 5
graceful_timeout = 30

# Process naming
proc_name = "tutor_selection_api"

# Server mechanics
daemon = False
pidfile = None

# Logging
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()


# Server hooks
def when_ready(server):
    """Called just after the server is started."""
    server.log.info("Tutor selection API ready, spawning %s workers", workers)


def worker_abort(worker):
    """Called when a worker is aborted, usually after a timeout."""
    worker.log.warning("Worker %s aborted", worker.pid)
