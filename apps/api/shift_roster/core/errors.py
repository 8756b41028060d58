"""
Error taxonomy for preview/deployment.

InvalidRequestError is raised before any store call. StoreError wraps a
collaborator failure and is never retried here. PartialDeploymentError means
the bulk materialize already went through and a later step did not.
"""
from __future__ import annotations


class RosterError(Exception):
    pass


class InvalidRequestError(RosterError):
    pass


class StoreError(RosterError):
    pass


class PruningError(RosterError):
    def __init__(self, message: str, pruned_count: int):
        super().__init__(message)
        self.pruned_count = pruned_count


class PartialDeploymentError(RosterError):
    def __init__(self, message: str, inserted_count: int, pruned_count: int = 0):
        super().__init__(message)
        self.inserted_count = inserted_count
        self.pruned_count = pruned_count

    def to_payload(self) -> dict:
        return {
            "error": str(self),
            "inserted_count": self.inserted_count,
            "pruned_count": self.pruned_count,
            "status": "partially_done",
        }
