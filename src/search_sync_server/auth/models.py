"""
Caller identity and the scopes the sync server understands.

Inbound (content host -> sync server):
    index_admin   administrative actions (mappings, bulk steps, clear, status)
    index_write   lifecycle notifications (saved, status changed, deleted)

Outbound (sync server -> content host):
    content_read  listing sites, kinds, posts and terms
    schema_read   reading custom-field group definitions
"""

from typing import FrozenSet

from pydantic import BaseModel, ConfigDict, Field


SCOPE_INDEX_ADMIN = "index_admin"
SCOPE_INDEX_WRITE = "index_write"

SCOPE_CONTENT_READ = "content_read"
SCOPE_SCHEMA_READ = "schema_read"


class HostCaller(BaseModel):
    """
    The verified sender of a request: the host itself (its lifecycle hooks)
    or an administrator acting through it.
    """

    subject: str = Field(..., min_length=1)
    scopes: FrozenSet[str] = Field(default_factory=frozenset)

    model_config = ConfigDict(frozen=True, extra="forbid")

    def missing(self, required: FrozenSet[str]) -> FrozenSet[str]:
        return required - self.scopes
