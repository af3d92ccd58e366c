"""
Durable Job Queue

A minimal PostgreSQL-backed job queue where producers enqueue work items and
consumers atomically claim them using row-level locking, so that no job is
ever handed to two consumers.
"""

__version__ = "1.0.0"
