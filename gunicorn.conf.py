"""
Gunicorn configuration for the mentortrack server.

Env vars that override defaults:
  PORT       TCP port to bind
  WORKERS    number of worker processes (default: 1)
  LOG_LEVEL  gunicorn log level (default: info)

The dashboard caches, timers and notice queue live in the worker process,
so every extra worker holds its own session state and issues its own
remote calls. Keep WORKERS at 1 unless requests are pinned to a worker.
"""
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

workers = int(os.environ.get("WORKERS", "1"))

# Each worker runs Uvicorn's ASGI event loop inside Gunicorn's process manager.
worker_class = "uvicorn.workers.UvicornWorker"

keepalive = 5

# Above the remote request timeout so a slow upstream call is not killed mid-flight.
timeout = 120

# stdout only
loglevel = os.environ.get("LOG_LEVEL", "info").lower()
accesslog = "-"
errorlog = "-"
access_log_format = '%(h)s "%(r)s" %(s)s %(b)sB %(D)sµs'

graceful_timeout = 30
