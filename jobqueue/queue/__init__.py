"""
Queue module.
Contains the claim protocol and the queue service built on the job store.
"""

from jobqueue.queue.claim import ClaimProtocol
from jobqueue.queue.service import QueueService

__all__ = ["ClaimProtocol", "QueueService"]
