# gunicorn.conf.py
import os

# Worker configuration
# Each request runs in its own sync worker; all shared state lives in the database
workers = int(os.getenv("GUNICORN_WORKERS", 2))
worker_class = "sync"
timeout = int(os.getenv("GUNICORN_TIMEOUT", 30))
keepalive = 2
max_requests = 1000
max_requests_jitter = 50

# Logging
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("GUNICORN_LOG_LEVEL", "info")

# Process naming
proc_name = "socialhub"

# Bind address
bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")

wsgi_app = "socialhub.wsgi:application"

# Behind a TLS-terminating proxy
forwarded_allow_ips = os.getenv("FORWARDED_ALLOW_IPS", "*")
