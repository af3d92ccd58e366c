"""
Client module.
Contains the HTTP client and the command line interface.
"""

from jobqueue.client.http import QueueClient, QueueClientError

__all__ = ["QueueClient", "QueueClientError"]
