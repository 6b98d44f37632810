"""
Gunicorn configuration for MP3 Auto Tagger production deployment

    gunicorn -c gunicorn_config.py app:app
"""
import os

bind = f"{os.environ.get('HOST', '0.0.0.0')}:{os.environ.get('PORT', '3002')}"

# One sync worker: batches are processed one file after another and a
# single request may hold the worker for the whole batch
workers = 1
worker_class = 'sync'
timeout = int(os.environ.get('GUNICORN_TIMEOUT', '300'))  # AI analysis of large uploads is slow
graceful_timeout = 30

# Logging
accesslog = '-'
errorlog = '-'
loglevel = os.environ.get('LOG_LEVEL', 'info')
access_log_format = '%(h)s "%(r)s" %(s)s %(b)s %(D)sus'

proc_name = 'mp3-auto-tagger'

# Uploads are spooled by Flask into the storage directory
limit_request_line = 8190
forwarded_allow_ips = os.environ.get('FORWARDED_ALLOW_IPS', '127.0.0.1')


def when_ready(server):
    """Called just after the server is started."""
    server.log.info("MP3 Auto Tagger ready. Listening at: %s", server.address)


def worker_abort(worker):
    """Called when a worker times out, usually in the middle of a batch."""
    worker.log.warning("Worker %s aborted; a batch may have been cut short", worker.pid)


def on_exit(server):
    """Called just before exiting."""
    server.log.info("MP3 Auto Tagger is shutting down")
