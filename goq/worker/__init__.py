"""
Worker module.
Contains the dispatcher, the worker pool and the runnable worker process.
"""

from goq.worker.dispatcher import Dispatcher
from goq.worker.pool import WorkerPool

__all__ = ["Dispatcher", "WorkerPool"]
