############################################################
#
# etlive - ET Live Data Server
#
# exceptions.py: Error taxonomy for configuration, polling and lookups
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Collector exceptions.

ConfigError is fatal at startup. PollError subclasses are expected and are
absorbed by the scheduler (the node's cache entry becomes absent). Lookup
errors are surfaced to API callers as "no data" conditions.
"""

from typing import Optional


class CollectorError(Exception):
    """Base class for all collector errors."""


class ConfigError(CollectorError):
    """Node configuration is missing, unparsable, invalid or empty."""


class PollError(CollectorError):
    """A single poll against a node endpoint failed."""

    outcome = "error"

    def __init__(self, endpoint: str, message: str):
        self.endpoint = endpoint
        super().__init__(f"{endpoint}: {message}")


class PollTimeoutError(PollError):
    """The node did not answer within the poll timeout."""

    outcome = "timeout"


class PollConnectionError(PollError):
    """The node could not be reached."""

    outcome = "connection_failed"


class PollHTTPError(PollError):
    """The node answered with a status other than 200."""

    outcome = "http_error"

    def __init__(self, endpoint: str, status_code: int):
        self.status_code = status_code
        super().__init__(endpoint, f"unexpected HTTP status {status_code}")


class PollDecodeError(PollError):
    """The node's response body is not a valid measurement payload."""

    outcome = "decode_error"


class CacheLookupError(CollectorError):
    """Base class for cache/registry lookup failures."""

    def __init__(self, node_id: str, message: Optional[str] = None):
        self.node_id = node_id
        super().__init__(message or node_id)


class NodeNotFoundError(CacheLookupError):
    """The node id is not in the configured node set."""

    def __init__(self, node_id: str):
        super().__init__(node_id, f"unknown node '{node_id}'")


class NoDataError(CacheLookupError):
    """The node is known but has no cached measurement."""

    def __init__(self, node_id: str):
        super().__init__(node_id, f"no data for node '{node_id}'")
