from __future__ import annotations


class DiscoveryError(Exception):
    """Business-rule rejection raised by group discovery and join."""

    status_code = 400


class InvalidInput(DiscoveryError):
    status_code = 400


class GroupNotFound(DiscoveryError):
    status_code = 404


class DuplicateMember(DiscoveryError):
    status_code = 400


class PrivateGroupForbidden(DiscoveryError):
    status_code = 403


class CapacityExceeded(DiscoveryError):
    status_code = 400
