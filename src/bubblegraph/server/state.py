"""Process-wide server state: live layouts, content store and session provider.

Everything here runs on the server's event loop. Layout stepping is driven
by an ``AsyncioFrameScheduler``, so frame callbacks, request handlers and
WebSocket loops never overlap.
"""

from __future__ import annotations

import logging

from bubblegraph.auth.session import SessionProvider
from bubblegraph.config import LayoutSettings, get_auth_settings, get_layout_settings
from bubblegraph.content.store import ContentStore
from bubblegraph.corpora.landing import create_landing_nodes
from bubblegraph.engine.scheduler import AsyncioFrameScheduler, FrameScheduler
from bubblegraph.events import Subscriptions
from bubblegraph.interaction.resize import WindowSize
from bubblegraph.layout import BUBBLE_PRESET, KNOWLEDGE_PRESET, GraphLayout
from bubblegraph.logging_config import layout_context

logger = logging.getLogger(__name__)


class UnknownLayoutError(KeyError):
    """Raised when a layout name is not hosted."""


class LayoutHost:
    """Owns the site's two layouts.

    The bubble layout is mounted once with the landing glyphs. The knowledge
    layout is rebuilt from the content store after every content write.
    """

    def __init__(
        self,
        store: ContentStore,
        settings: LayoutSettings,
        scheduler: FrameScheduler | None = None,
    ) -> None:
        self.store = store
        self.settings = settings
        self.scheduler = (
            scheduler if scheduler is not None else AsyncioFrameScheduler(settings.frame_rate)
        )
        window = WindowSize(settings.viewport_width, settings.viewport_height)
        self.layouts: dict[str, GraphLayout] = {
            preset.name: GraphLayout(
                self.scheduler,
                window,
                preset=preset,
                padding=settings.padding,
                click_distance=settings.click_distance,
                seed=settings.seed,
            )
            for preset in (BUBBLE_PRESET, KNOWLEDGE_PRESET)
        }
        self._subscriptions = Subscriptions()
        self.started = False

    def names(self) -> list[str]:
        return list(self.layouts)

    def get(self, name: str) -> GraphLayout:
        try:
            return self.layouts[name]
        except KeyError:
            raise UnknownLayoutError(name) from None

    def start(self) -> None:
        """Mount both layouts and follow content changes. Idempotent."""
        if self.started:
            return
        with layout_context(BUBBLE_PRESET.name):
            self.layouts[BUBBLE_PRESET.name].mount(create_landing_nodes())
        self.refresh_knowledge()
        self._subscriptions.add(self.store.on_change.connect(self._content_changed))
        self.started = True
        logger.info("Layout host started: %s", ", ".join(self.layouts))

    def stop(self) -> None:
        """Unmount every layout and drop the content subscription. Idempotent."""
        self._subscriptions.dispose()
        for layout in self.layouts.values():
            layout.unmount()
        if isinstance(self.scheduler, AsyncioFrameScheduler):
            self.scheduler.cancel_all()
        if self.started:
            logger.info("Layout host stopped")
        self.started = False

    def refresh_knowledge(self) -> None:
        nodes, links = self.store.graph_input()
        with layout_context(KNOWLEDGE_PRESET.name):
            self.layouts[KNOWLEDGE_PRESET.name].remount(nodes, links)

    def _content_changed(self, kind: str) -> None:
        logger.debug("Content changed (%s), remounting knowledge layout", kind)
        self.refresh_knowledge()


# Global state, created lazily
_content_store: ContentStore | None = None
_session_provider: SessionProvider | None = None
_layout_host: LayoutHost | None = None


def get_content_store() -> ContentStore:
    """Get or create the global content store."""
    global _content_store
    if _content_store is None:
        _content_store = ContentStore()
    return _content_store


def get_session_provider() -> SessionProvider:
    """Get or create the global session provider from ``AuthSettings``."""
    global _session_provider
    if _session_provider is None:
        _session_provider = SessionProvider.from_settings(get_auth_settings())
    return _session_provider


def get_layout_host() -> LayoutHost:
    """Get or create the global layout host (not started)."""
    global _layout_host
    if _layout_host is None:
        _layout_host = LayoutHost(get_content_store(), get_layout_settings())
    return _layout_host


def reset_state() -> None:
    """Tear down and forget all global state."""
    global _content_store, _session_provider, _layout_host
    if _layout_host is not None:
        _layout_host.stop()
    if _session_provider is not None:
        _session_provider.teardown()
    _content_store = None
    _session_provider = None
    _layout_host = None
