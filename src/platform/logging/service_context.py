from functools import lru_cache
import os
import socket

from src.platform.config.core_setting import settings


@lru_cache(maxsize=1)
def get_service_context() -> str:
    """`<service>@<env>:<host>/<pid>` tag bound to every log line."""
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')
    host = os.getenv('HOSTNAME') or socket.gethostname()
    return f'{settings.SERVICE_NAME}@{deploy_env}:{host[:12]}/{os.getpid()}'
