import multiprocessing
import os
from dotenv import load_dotenv

# Auto-load .env so PORT and other settings are picked up.
load_dotenv()

bind = f"0.0.0.0:{os.getenv('PORT', '8081')}"
workers = int(os.getenv("GUNICORN_WORKERS", multiprocessing.cpu_count() // 2 or 2))
worker_class = os.getenv("GUNICORN_WORKER_CLASS", "uvicorn.workers.UvicornWorker")
# Save retries block a request for up to the sum of their delays; keep this well above that.
timeout = int(os.getenv("GUNICORN_TIMEOUT", "60"))
# Default to stdout/stderr so container logs can be shipped by the host/agent.
accesslog = os.getenv("GUNICORN_ACCESS_LOG", "-")
errorlog = os.getenv("GUNICORN_ERROR_LOG", "-")
loglevel = os.getenv("LOG_LEVEL", "info").lower()
