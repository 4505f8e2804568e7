from .access_index import AccessIndex
from .prerequisite_graph import PrerequisiteGraph
from .catalog import PrincipalAuthentication, StoreAuthorityOracle, StoreCourseCatalog
from .events import LoggingEventSink

__all__ = [
    "AccessIndex",
    "PrerequisiteGraph",
    "PrincipalAuthentication",
    "StoreAuthorityOracle",
    "StoreCourseCatalog",
    "LoggingEventSink",
]
