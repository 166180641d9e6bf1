import os
import sys

# Add src directory to Python path so 'advocat' package can be found
sys.path.append(os.path.join(os.getcwd(), 'src'))

bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

# Case maps and open intake sessions live in process memory; keep a single
# worker so every request for a user sees the same store.
workers = int(os.environ.get('GUNICORN_WORKERS', '1'))
threads = int(os.environ.get('GUNICORN_THREADS', '4'))
worker_class = "gthread"
worker_tmp_dir = "/dev/shm"

preload_app = False
accesslog = "-"
errorlog = "-"
loglevel = "info"
# Deep-mode analyses can take a while upstream
timeout = 120
wsgi_app = "advocat.api.server:app"
