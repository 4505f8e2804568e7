"""
Prerequisite graph: course -> [prerequisite course].

Each course's edge set is stored under its own key and replaced wholesale on
edit; a course that never had prerequisites set has an empty edge set. Every
edit is validated against the stored graph so that the graph stays acyclic,
free of self-loops and duplicate edges, and only references existing courses.
"""

import logging
from typing import Dict, List, Set

from courseaccess_backend.api.exceptions import (
    CircularDependencyError,
    CourseNotFoundError,
    DuplicatePrerequisiteError,
    PrerequisiteCourseNotFoundError,
    SelfPrerequisiteError,
)
from courseaccess_backend.permissions.gate import AuthorizationGate
from courseaccess_backend.permissions.ports import CourseCatalog, EventSink
from courseaccess_backend.permissions.principal import Principal
from courseaccess_backend.services.events import PREREQUISITES_UPDATED, publish_safely
from courseaccess_backend.storage import keys
from courseaccess_backend.storage.durable import DurableIndexStore, StagedTransaction

logger = logging.getLogger(__name__)


class PrerequisiteGraph:

    def __init__(
        self,
        store: DurableIndexStore,
        catalog: CourseCatalog,
        gate: AuthorizationGate,
        events: EventSink = None,
    ):
        self.store = store
        self.catalog = catalog
        self.gate = gate
        self.events = events

    async def get_prerequisites(self, course_id: str) -> List[str]:
        return list(await self.store.get(keys.course_prerequisites_key(course_id), []))

    async def set_prerequisites(self, caller: Principal, course_id: str, new_prerequisites: List[str]) -> List[str]:
        """
        Replace the prerequisites of `course_id` with `new_prerequisites`.

        Checks run in order and the first failure aborts the call without
        writing anything:

        1. caller is authenticated and created the course   -> UnauthorizedError
        2. the course exists                                 -> CourseNotFoundError
        3. every prerequisite exists                         -> PrerequisiteCourseNotFoundError
        4. no prerequisite is listed twice                   -> DuplicatePrerequisiteError
        5. the course is not its own prerequisite            -> SelfPrerequisiteError
        6. no new edge closes a cycle                        -> CircularDependencyError
        """
        new_prerequisites = list(new_prerequisites)

        await self.gate.require_course_creator(caller, course_id)

        async with self.store.transaction() as txn:
            if not await self.catalog.exists(course_id):
                raise CourseNotFoundError(course_id)

            for prerequisite_id in new_prerequisites:
                if not await self.catalog.exists(prerequisite_id):
                    raise PrerequisiteCourseNotFoundError(course_id, prerequisite_id)

            self._validate_no_duplicates(course_id, new_prerequisites)

            if course_id in new_prerequisites:
                raise SelfPrerequisiteError(course_id)

            await self._validate_no_cycle(txn, course_id, new_prerequisites)

            prerequisites_key = keys.course_prerequisites_key(course_id)
            if new_prerequisites:
                txn.set(prerequisites_key, new_prerequisites, persistent=True)
            else:
                txn.delete(prerequisites_key)

        logger.info(f"Prerequisites of course {course_id} set to {new_prerequisites} by {caller.user_id}")
        await publish_safely(self.events, PREREQUISITES_UPDATED, {
            "course_id": course_id,
            "prerequisites": new_prerequisites,
        })

        return new_prerequisites

    def _validate_no_duplicates(self, course_id: str, prerequisites: List[str]):
        seen: Set[str] = set()
        for prerequisite_id in prerequisites:
            if prerequisite_id in seen:
                raise DuplicatePrerequisiteError(course_id, prerequisite_id)
            seen.add(prerequisite_id)

    async def _validate_no_cycle(self, txn: StagedTransaction, course_id: str, prerequisites: List[str]):
        # shared by all candidates: a visited node off the path cannot reach course_id
        visited: Set[str] = set()
        on_path: Set[str] = set()
        edges: Dict[str, List[str]] = {}

        for prerequisite_id in prerequisites:
            if await self._reaches(txn, prerequisite_id, course_id, visited, on_path, edges):
                logger.info(f"Rejected prerequisite {prerequisite_id} for {course_id}: circular dependency")
                raise CircularDependencyError(course_id, prerequisite_id)

    async def _reaches(
        self,
        txn: StagedTransaction,
        start: str,
        target: str,
        visited: Set[str],
        on_path: Set[str],
        edges: Dict[str, List[str]],
    ) -> bool:
        """Depth-first search over the stored graph: is `target` reachable from `start`?

        A node met again while it is still on the active path means the stored
        graph already holds a cycle; that is reported as reachable as well.
        """
        if start == target or start in on_path:
            return True
        if start in visited:
            return False

        visited.add(start)
        on_path.add(start)
        stack = [(start, iter(await self._edges(txn, start, edges)))]

        while stack:
            node, children = stack[-1]
            child = next(children, None)

            if child is None:
                stack.pop()
                on_path.discard(node)
                continue

            if child == target or child in on_path:
                return True
            if child in visited:
                continue

            visited.add(child)
            on_path.add(child)
            stack.append((child, iter(await self._edges(txn, child, edges))))

        return False

    async def _edges(self, txn: StagedTransaction, course_id: str, edges: Dict[str, List[str]]) -> List[str]:
        if course_id not in edges:
            edges[course_id] = list(await txn.get(keys.course_prerequisites_key(course_id), []))
        return edges[course_id]
