"""Gunicorn configuration file.

Extract locks live inside one process, so the service runs a single
worker unless GUNICORN_WORKERS says otherwise.
"""

import logging
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '8080')}"
backlog = 1024

workers = int(os.environ.get("GUNICORN_WORKERS", "1"))
worker_class = "uvicorn.workers.UvicornWorker"

# Snapshot downloads and pyosmium runs can take an hour; the async worker
# keeps its heartbeat while requests await them.
timeout = 180
graceful_timeout = 120
keepalive = 5

errorlog = "-"
loglevel = "info"
accesslog = "-"
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s"'
logconfig_dict = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s [%(process)d] [%(levelname)s] %(message)s",
            "datefmt": "[%Y-%m-%d %H:%M:%S %z]",
        },
        "access": {
            "format": access_log_format,
        },
    },
    "handlers": {
        "error_console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "stream": "ext://sys.stderr",
        },
        "access_console": {
            "class": "logging.StreamHandler",
            "formatter": "access",
            "stream": "ext://sys.stdout",
        },
    },
    "loggers": {
        "gunicorn.error": {
            "level": loglevel.upper(),
            "handlers": ["error_console"],
            "propagate": False,
        },
    },
    "root": {
        "level": loglevel.upper(),
        "handlers": ["error_console"],
    },
}

proc_name = "osm-extracts"

preload_app = False

wsgi_app = "app:app"

daemon = False


def on_starting(_server):
    """Log when server starts."""
    logging.getLogger("gunicorn.error").info(
        "Starting Gunicorn with %d workers, timeout %ds", workers, timeout
    )
    if workers > 1:
        logging.getLogger("gunicorn.error").warning(
            "Extract locks are per worker; %d workers may race on the same extract",
            workers,
        )


def on_exit(_server):
    """Log when server exits."""
    logging.getLogger("gunicorn.error").info("Gunicorn server shutting down.")


def worker_abort(worker):
    """Log worker timeouts."""
    logging.getLogger("gunicorn.error").warning(
        "Worker %d was aborted due to timeout or memory limits",
        worker.pid,
    )
