"""Gunicorn configuration for production deployment.

Reads settings from environment variables (same as config.py).

The memory cache lives inside each worker process and is not shared, so
every extra worker holds its own copy of the cache and its own budget.
Keep WORKERS at 1 unless per-worker caches are acceptable.

Usage:
    gunicorn main:app -c gunicorn.conf.py
"""
import os

# Load from environment (same vars used by config.py)
host = os.getenv("HOST", "0.0.0.0")
port = os.getenv("PORT", "3010")
log_level = os.getenv("LOG_LEVEL", "INFO").lower()
debug = os.getenv("DEBUG", "false").lower() == "true"

bind = f"{host}:{port}"

workers = max(1, int(os.getenv("WORKERS", "1")))
worker_class = "uvicorn.workers.UvicornWorker"

# Timeouts - configurable via env
timeout = int(os.getenv("GUNICORN_TIMEOUT", "120"))
graceful_timeout = int(os.getenv("GUNICORN_GRACEFUL_TIMEOUT", "30"))
keepalive = int(os.getenv("GUNICORN_KEEPALIVE", "5"))

accesslog = "-" if not debug else None
errorlog = "-"
loglevel = log_level

proc_name = "cache-manager"

# The maintenance scheduler starts in each worker's lifespan, never in the master
preload_app = False
