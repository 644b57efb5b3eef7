"""
Service layer for log tailing.

Session orchestration over the line sources.
"""

from .tail_session import TailSession, TailView, describe_configuration

__all__ = [
    "TailSession",
    "TailView",
    "describe_configuration",
]
