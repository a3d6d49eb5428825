"""
Celery worker entry point
Processes deferred audit writes
"""
import logging
from celery.signals import worker_ready, worker_shutdown

from app.config.celery_config import AUDIT_QUEUE, celery_app
from app.utils.my_logging import setup_logging

# Setup logging first; task logs stay at LOG_LEVEL
setup_logging(verbose=False)
logger = logging.getLogger(__name__)


@worker_ready.connect
def worker_ready_handler(sender=None, **kwargs):
    """Handle worker startup"""
    logger.info("Celery worker ready")
    logger.info(f"Registered tasks: {list(celery_app.tasks.keys())}")


@worker_shutdown.connect
def worker_shutdown_handler(sender=None, **kwargs):
    """Handle worker shutdown"""
    logger.info("Celery worker shutting down...")


if __name__ == "__main__":
    celery_app.start([
        'worker',
        '--loglevel=info',
        '-Q', AUDIT_QUEUE,
        '--concurrency=2',
        '--max-tasks-per-child=1000'
    ])
