"""
Code Stats Extension Service

Wires the settings cascade, the GraphQL channel, the view host and the
registration reconciler together, and owns their lifecycle.
"""

import asyncio
import logging
from typing import Optional

from codestats.clients.graphql_client import HttpGraphQLChannel, RemoteQueryClient
from codestats.config import settings
from .reconciler import RegistrationReconciler
from .settings_store import LayeredSettingsStore
from .view_host import ViewHost
from .view_provider import ViewContentProvider

logger = logging.getLogger(__name__)


class CodeStatsExtension:
    """
    The code stats insights extension.

    activate() starts watching the settings cascade and keeps one pair of
    view providers registered per configured insight; deactivate() releases
    all of them.
    """

    def __init__(
        self,
        store: Optional[LayeredSettingsStore] = None,
        channel=None,
        host: Optional[ViewHost] = None,
        instance_url: str = settings.SOURCEGRAPH_URL,
    ):
        self.store = store or LayeredSettingsStore()
        self.channel = channel or HttpGraphQLChannel(base_url=instance_url)
        self.host = host or ViewHost()
        self.provider = ViewContentProvider(RemoteQueryClient(self.channel), instance_url=instance_url)
        self.reconciler = RegistrationReconciler(self.host, self.provider)
        self._task: Optional[asyncio.Task] = None

    @property
    def is_active(self) -> bool:
        return self._task is not None and not self._task.done()

    async def activate(self) -> None:
        """Start reconciling view providers against the settings cascade."""
        if self.is_active:
            return

        logger.info(f"Activating code stats insights ({len(self.store.files)} settings files)")
        self.store.start()
        self._task = asyncio.create_task(self.reconciler.run(self.store.snapshots()))
        self._task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Code stats reconciliation stopped unexpectedly: {error}")

    async def deactivate(self) -> None:
        """Stop watching settings and release every view provider."""
        # Joining the observer thread blocks
        await asyncio.to_thread(self.store.stop)

        if self._task is not None:
            try:
                await asyncio.wait_for(self._task, timeout=5.0)
            except asyncio.TimeoutError:
                logger.warning("Reconciliation did not stop in time, cancelling")
            except Exception as e:
                logger.error(f"Error stopping reconciliation: {e}")
            self._task = None

        await self.reconciler.shutdown()

        close = getattr(self.channel, "close", None)
        if close is not None:
            await close()

        logger.info("Code stats insights deactivated")


# Singleton instance
_extension = None


def get_code_stats_extension() -> CodeStatsExtension:
    """
    Get the singleton code stats extension instance.

    Returns:
        CodeStatsExtension instance
    """
    global _extension
    if _extension is None:
        _extension = CodeStatsExtension()
    return _extension


def set_code_stats_extension(extension: Optional[CodeStatsExtension]) -> None:
    """Replace the singleton (used by the application factory and tests)."""
    global _extension
    _extension = extension
