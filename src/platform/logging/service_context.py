"""Service identity stamped on every log line."""

from functools import lru_cache
import os
import socket


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'booking-service')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')

    # Containers get their hostname from the orchestrator, local runs fall back to the PID
    if deploy_env == 'local_dev':
        instance = str(os.getpid())
    else:
        instance = (os.getenv('HOSTNAME') or socket.gethostname())[:12]

    return f'{service_name}@{deploy_env}:{instance}'
