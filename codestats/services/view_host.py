"""
In-process view host.

Plays the part of the host application's UI registration surface: view
providers are registered by name for a rendering location ("insightsPage" or
"directory") and rendered on demand.
"""

import logging
from typing import Awaitable, Callable, Dict, List, Optional

from codestats.exceptions import DuplicateRegistrationError, UnknownViewError
from codestats.insights.models import ChartView, RenderingContext

logger = logging.getLogger(__name__)

INSIGHTS_PAGE = "insightsPage"
DIRECTORY = "directory"
VIEW_LOCATIONS = (INSIGHTS_PAGE, DIRECTORY)

ProvideView = Callable[[RenderingContext], Awaitable[ChartView]]


class Registration:
    """A live view provider registration. Release it to unregister."""

    def __init__(self, host: "ViewHost", name: str, where: str, provide_view: ProvideView):
        self.host = host
        self.name = name
        self.where = where
        self.provide_view = provide_view
        self.released = False

    def release(self) -> None:
        """Unregister the view provider. Releasing twice is a no-op."""
        if self.released:
            return
        self.released = True
        self.host._unregister(self)

    def __repr__(self) -> str:
        state = "released" if self.released else "live"
        return f"<Registration {self.name} ({self.where}, {state})>"


class ViewHost:
    """Registry of live view providers."""

    def __init__(self):
        self._registrations: Dict[str, Registration] = {}

    def register(self, name: str, where: str, provide_view: ProvideView) -> Registration:
        """
        Register a view provider.

        Raises:
            ValueError: If `where` is not a known rendering location
            DuplicateRegistrationError: If `name` is already registered
        """
        if where not in VIEW_LOCATIONS:
            raise ValueError(f"Unknown view location '{where}', expected one of {VIEW_LOCATIONS}")
        if name in self._registrations:
            raise DuplicateRegistrationError(f"View provider '{name}' is already registered")

        registration = Registration(self, name, where, provide_view)
        self._registrations[name] = registration
        logger.debug(f"Registered view provider {name} ({where})")
        return registration

    def _unregister(self, registration: Registration) -> None:
        if self._registrations.get(registration.name) is registration:
            del self._registrations[registration.name]
            logger.debug(f"Unregistered view provider {registration.name}")

    def get(self, name: str) -> Optional[Registration]:
        return self._registrations.get(name)

    def list_views(self, where: Optional[str] = None) -> List[str]:
        """Names of live view providers, optionally only those for one location."""
        return sorted(
            name for name, registration in self._registrations.items()
            if where is None or registration.where == where
        )

    def __len__(self) -> int:
        return len(self._registrations)

    async def render(self, name: str, context: Optional[RenderingContext] = None) -> Optional[ChartView]:
        """
        Render a view by name.

        Returns None when the registration was released while the view was
        being computed; such a result is stale and must not be shown.

        Raises:
            UnknownViewError: If no provider is registered under `name`
        """
        registration = self._registrations.get(name)
        if registration is None:
            raise UnknownViewError(f"No view provider registered as '{name}'")

        view = await registration.provide_view(context or RenderingContext())

        if registration.released:
            logger.info(f"Discarding view {name}: provider was released while rendering")
            return None
        return view
