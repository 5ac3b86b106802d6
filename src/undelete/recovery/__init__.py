"""
Deletion handling.

``routing``
    :class:`~undelete.recovery.routing.RoutingMode` and the destination rule.
``alert``
    Text rendering of the recovery header.
``dispatcher``
    :class:`~undelete.recovery.dispatcher.RecoveryDispatcher`, which turns a
    revoke update into up to three outbound sends.
"""

from .routing import RoutingMode, resolve_destination

__all__ = ["RoutingMode", "resolve_destination"]
