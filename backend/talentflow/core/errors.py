"""
Error taxonomy shared by the store, the request handlers and the client.
"""

import httpx


class TalentFlowError(Exception):
    """Base class for domain errors."""


class NotFound(TalentFlowError):
    """Raised when an identifier is unknown to the store."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} '{record_id}' not found")


class DuplicateKey(TalentFlowError):
    """Raised when an identifier or unique natural key is already present."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} '{record_id}' already exists")


class InvalidQuery(TalentFlowError):
    """Raised for unsupported list parameters (e.g. an unknown sort field)."""


class SeedError(TalentFlowError):
    """Raised when a seeding attempt fails; the store is left untouched."""


class TransientNetworkFailure(httpx.NetworkError):
    """Simulated link failure, raised before the request reaches a handler."""
