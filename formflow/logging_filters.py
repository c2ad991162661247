import logging
import threading
from contextlib import contextmanager

_thread_locals = threading.local()


class OperationFilter(logging.Filter):
    def filter(self, record):
        if not getattr(record, 'operation', None):
            record.operation = get_current_operation()
        return True


@contextmanager
def operation_context(label):
    """Tag every log record emitted inside the block with ``label``."""
    previous = getattr(_thread_locals, 'operation', None)
    _thread_locals.operation = label
    try:
        yield
    finally:
        _thread_locals.operation = previous


def get_current_operation():
    return getattr(_thread_locals, 'operation', None) or 'no-op'
