"""
Registration Reconciler

Keeps the host's view provider registrations in step with the insight
definitions resolved from the settings cascade. Every resolution pass owns a
RegistrationBag; a new pass releases the whole previous bag before
registering anything, so two providers with the same name never coexist.
A registration whose release fails is kept and released again before its
name is reused, on the next pass and on shutdown.
"""

import inspect
import logging
from functools import partial
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional, Tuple

from codestats.config import settings
from codestats.insights.models import InsightDefinition
from codestats.insights.resolver import Resolution, resolve, resolutions_equal
from .view_host import VIEW_LOCATIONS

logger = logging.getLogger(__name__)


async def _maybe_await(value):
    if inspect.isawaitable(value):
        return await value
    return value


def registration_name(insight_id: str, where: str) -> str:
    """Name of the view provider registered for an insight at a location."""
    return f"{settings.VIEW_PROVIDER_PREFIX}{insight_id}.{where}"


class RegistrationBag:
    """The registrations created by one reconciliation pass."""

    def __init__(self):
        self._entries: List[Tuple[str, str, Any]] = []

    def add(self, insight_id: str, name: str, registration: Any) -> None:
        self._entries.append((insight_id, name, registration))

    def take(self, other: "RegistrationBag") -> None:
        """Move every registration of another bag into this one."""
        self._entries.extend(other._entries)
        other._entries = []

    @property
    def ids(self) -> List[str]:
        return list(dict.fromkeys(insight_id for insight_id, _, _ in self._entries))

    @property
    def names(self) -> List[str]:
        return [name for _, name, _ in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    @staticmethod
    async def _release(registration: Any) -> bool:
        try:
            await _maybe_await(registration.release())
        except Exception as e:
            logger.error(f"[Reconciler] Failed to release {registration!r}: {e}")
            return False
        return True

    async def release_all(self) -> int:
        """
        Release every registration in the bag.

        Registrations whose release fails stay in the bag so they can be
        released later; released ones are dropped and never released twice.
        """
        entries, self._entries = self._entries, []

        released = 0
        for entry in entries:
            if await self._release(entry[2]):
                released += 1
            else:
                self._entries.append(entry)
        return released

    async def release_name(self, name: str) -> bool:
        """Release the registrations held under `name`. True if none remain."""
        remaining = []
        for entry in self._entries:
            if entry[1] == name and await self._release(entry[2]):
                continue
            remaining.append(entry)
        self._entries = remaining
        return name not in self.names


class RegistrationReconciler:
    """Maintains one registration pair per resolved insight definition."""

    def __init__(self, host, provider):
        """
        Initialize the reconciler.

        Args:
            host: UI registration surface with register(name, where, provide_view)
            provider: ViewContentProvider whose provide_view renders each insight
        """
        self.host = host
        self.provider = provider
        self._bag = RegistrationBag()
        # Registrations of earlier passes whose release failed
        self._stale = RegistrationBag()
        self._last_resolution: Optional[Resolution] = None
        self._shut_down = False

    def live_ids(self) -> List[str]:
        return self._bag.ids

    def registration_names(self) -> List[str]:
        return self._bag.names

    async def reconcile(self, resolution: Resolution) -> bool:
        """
        Bring registrations in line with a resolution.

        Returns:
            False if the resolution is identical to the last one and nothing changed
        """
        if self._shut_down:
            logger.warning("[Reconciler] Ignoring resolution received after shutdown")
            return False

        if resolutions_equal(resolution, self._last_resolution):
            logger.debug("[Reconciler] Resolution unchanged, keeping registrations")
            return False
        self._last_resolution = list(resolution)

        released = await self._release_previous()
        if released:
            logger.info(f"[Reconciler] Released {released} view providers")

        # Later entries for the same id win
        definitions: Dict[str, InsightDefinition] = {}
        for insight_id, definition in resolution:
            if definition is None:
                definitions.pop(insight_id, None)
            else:
                definitions[insight_id] = definition

        for insight_id, definition in definitions.items():
            await self._register(insight_id, definition)

        logger.info(f"[Reconciler] {len(definitions)} insights live with {len(self._bag)} view providers")
        return True

    async def _release_previous(self) -> int:
        """Release the previous pass's registrations and retry stale ones."""
        released = await self._stale.release_all()
        released += await self._bag.release_all()
        self._stale.take(self._bag)
        self._bag = RegistrationBag()
        return released

    async def _register(self, insight_id: str, definition: InsightDefinition) -> None:
        provide_view = partial(self.provider.provide_view, definition)
        for where in VIEW_LOCATIONS:
            name = registration_name(insight_id, where)
            if not await self._stale.release_name(name):
                logger.error(f"[Reconciler] Not registering {name}: its previous provider is still live")
                continue
            try:
                registration = await _maybe_await(self.host.register(name, where, provide_view))
            except Exception as e:
                logger.error(f"[Reconciler] Failed to register {name}: {e}")
                continue
            self._bag.add(insight_id, name, registration)

    async def process_snapshot(self, snapshot: Optional[Mapping[str, Any]]) -> bool:
        """Resolve a configuration snapshot and reconcile against it."""
        return await self.reconcile(resolve(snapshot))

    async def run(self, snapshots: AsyncIterator[Mapping[str, Any]]) -> None:
        """Reconcile every snapshot of a configuration stream, one at a time, in order."""
        logger.info("[Reconciler] Watching configuration for code stats insights")
        async for snapshot in snapshots:
            if self._shut_down:
                break
            await self.process_snapshot(snapshot)

    async def shutdown(self) -> None:
        """Release every live registration. Safe to call more than once."""
        if self._shut_down:
            return
        self._shut_down = True
        released = await self._release_previous()
        logger.info(f"[Reconciler] Shut down, released {released} view providers")
        if self._stale:
            logger.error(f"[Reconciler] Could not release view providers: {', '.join(self._stale.names)}")
