"""
Wiring of the access core.

Every component receives its storage handle and collaborators explicitly;
`build_services` is the one place that decides which implementations are
used, so tests can build the same graph over in-memory backends.
"""

from dataclasses import dataclass
from typing import Optional

from aiocache.base import BaseCache

from courseaccess_backend.permissions.gate import AuthorizationGate
from courseaccess_backend.permissions.ports import AuthenticationContext, EventSink
from courseaccess_backend.redis_cache import DURABLE_NAMESPACE, EPHEMERAL_NAMESPACE, build_cache
from courseaccess_backend.services.access_index import AccessIndex
from courseaccess_backend.services.catalog import PrincipalAuthentication, StoreAuthorityOracle, StoreCourseCatalog
from courseaccess_backend.services.events import LoggingEventSink
from courseaccess_backend.services.prerequisite_graph import PrerequisiteGraph
from courseaccess_backend.settings import settings
from courseaccess_backend.storage.durable import DurableIndexStore
from courseaccess_backend.storage.ephemeral import EphemeralCache


@dataclass
class ServiceContainer:
    store: DurableIndexStore
    cache: EphemeralCache
    authentication: AuthenticationContext
    catalog: StoreCourseCatalog
    authority: StoreAuthorityOracle
    access_index: AccessIndex
    gate: AuthorizationGate
    prerequisites: PrerequisiteGraph
    events: EventSink


def build_services(
    durable_backend: Optional[BaseCache] = None,
    ephemeral_backend: Optional[BaseCache] = None,
    events: Optional[EventSink] = None,
    durable_ttl: Optional[int] = None,
    ephemeral_ttl: Optional[int] = None,
) -> ServiceContainer:
    """Build the component graph; missing backends come from settings"""

    store = DurableIndexStore(
        durable_backend or build_cache(DURABLE_NAMESPACE),
        ttl=settings.DURABLE_TTL if durable_ttl is None else durable_ttl,
    )
    cache = EphemeralCache(
        ephemeral_backend or build_cache(EPHEMERAL_NAMESPACE),
        ttl_seconds=ephemeral_ttl or settings.EPHEMERAL_TTL,
    )
    events = events or LoggingEventSink()

    authentication = PrincipalAuthentication()
    catalog = StoreCourseCatalog(store, authentication, events)
    authority = StoreAuthorityOracle(store, authentication)
    access_index = AccessIndex(store, cache, events)
    gate = AuthorizationGate(authentication, authority, catalog, access_index)
    prerequisites = PrerequisiteGraph(store, catalog, gate, events)

    return ServiceContainer(
        store=store,
        cache=cache,
        authentication=authentication,
        catalog=catalog,
        authority=authority,
        access_index=access_index,
        gate=gate,
        prerequisites=prerequisites,
        events=events,
    )
