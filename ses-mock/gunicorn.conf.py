"""
Gunicorn settings: gunicorn -c gunicorn.conf.py main:app

One worker only: the email store lives in process memory, so a second worker
would hold a second, different store. Concurrency comes from threads.
"""

from config import Config

_config = Config.from_env()

bind = f"0.0.0.0:{_config.port}"
workers = 1
threads = 8
loglevel = _config.log_level.lower()
accesslog = "-"
