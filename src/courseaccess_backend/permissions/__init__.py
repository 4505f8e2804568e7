"""
Authorization for the course access backend.

Main components:
- principal: caller identity and its authentication flag
- ports: interfaces of the external collaborators (authentication, authority, catalog, events)
- gate: creator/admin/self policy checks guarding the access index and prerequisite graph
"""

from .principal import Principal

from .ports import (
    AuthenticationContext,
    AuthorityOracle,
    CourseCatalog,
    EventSink,
)

from .gate import AuthorizationGate

__all__ = [
    "Principal",
    "AuthenticationContext",
    "AuthorityOracle",
    "CourseCatalog",
    "EventSink",
    "AuthorizationGate",
]
