"""
Record stores for jobs and OAuth tokens.

Services depend on the abstract stores; the in-memory implementations are
the process-local default and the per-test substitute.
"""

from shortsbot.stores.jobs import InMemoryJobStore, JobStore
from shortsbot.stores.tokens import InMemoryTokenStore, TokenStore

__all__ = [
    "JobStore",
    "InMemoryJobStore",
    "TokenStore",
    "InMemoryTokenStore",
]
