"""Tests for the GraphLayout facade."""

import math

import pytest

from bubblegraph.corpora import create_landing_nodes
from bubblegraph.engine.scheduler import ManualFrameScheduler
from bubblegraph.events import Signal
from bubblegraph.interaction import WindowSize
from bubblegraph.layout import (
    BUBBLE_PRESET,
    KNOWLEDGE_PRESET,
    GraphLayout,
    PointerKind,
)
from bubblegraph.model import Link, Node


def bubble_layout(scheduler, **kwargs) -> GraphLayout:
    return GraphLayout(scheduler, WindowSize(800, 600), preset=BUBBLE_PRESET, seed=3, **kwargs)


def knowledge_layout(scheduler, **kwargs) -> GraphLayout:
    return GraphLayout(
        scheduler, WindowSize(1000, 800), preset=KNOWLEDGE_PRESET, seed=3, **kwargs
    )


def knowledge_nodes() -> list[Node]:
    return [
        Node(id="py", radius=60, data={"experience_level": 4, "blog_post_count": 1}),
        Node(id="fastapi", radius=45, data={"experience_level": 2, "blog_post_count": 0}),
        Node(id="docker", radius=40),
    ]


class TestMount:
    """Tests for mount / unmount."""

    def test_bubbles_placed_on_ring(self, scheduler):
        layout = bubble_layout(scheduler)
        nodes = create_landing_nodes()

        layout.mount(nodes)

        ring = 0.3 * 600
        for node in nodes:
            assert math.hypot(node.x - 400, node.y - 300) == pytest.approx(ring)
        assert layout.mounted
        assert scheduler.pending() == 1

    def test_knowledge_placed_inside_viewport(self, scheduler):
        layout = knowledge_layout(scheduler)

        layout.mount(knowledge_nodes())

        for node in layout.nodes:
            assert 0 <= node.x <= 1000
            assert 0 <= node.y <= 700

    def test_dangling_links_dropped(self, scheduler):
        layout = knowledge_layout(scheduler)
        links = [Link("py", "fastapi"), Link("py", "deleted"), Link("gone", "docker")]

        layout.mount(knowledge_nodes(), links)

        assert [link.id for link in layout.links] == ["py->fastapi"]
        assert layout.simulation.forces.names()[0] == "link"

    def test_empty_mount_is_quiet(self, scheduler):
        layout = knowledge_layout(scheduler)

        layout.mount([])

        assert scheduler.pending() == 0
        assert layout.snapshot().nodes == []

    def test_unmount_stops_loop_and_is_idempotent(self, scheduler):
        layout = bubble_layout(scheduler)
        layout.mount(create_landing_nodes())

        layout.unmount()
        layout.unmount()

        assert not layout.mounted
        assert scheduler.pending() == 0
        assert scheduler.advance(3) == 0

    def test_snapshot_without_simulation_is_empty(self, scheduler):
        layout = bubble_layout(scheduler)

        before = layout.snapshot()
        layout.mount(create_landing_nodes())
        scheduler.advance(2)
        layout.unmount()
        after = layout.snapshot()

        for frame in (before, after):
            assert frame.nodes == []
            assert frame.tick == 0
            assert (frame.width, frame.height) == (layout.viewport.width, layout.viewport.height)

    def test_remount_keeps_single_loop(self, scheduler):
        layout = knowledge_layout(scheduler)
        frames = []
        layout.on_frame.connect(frames.append)

        layout.mount(knowledge_nodes())
        layout.remount(knowledge_nodes()[:2])
        layout.remount(knowledge_nodes())

        assert scheduler.pending() == 1
        assert scheduler.advance() == 1
        assert len(frames) == 1

    def test_unmount_releases_window_listener(self, scheduler):
        window: Signal[WindowSize] = Signal("resize")
        layout = bubble_layout(scheduler, window_resized=window)

        layout.mount(create_landing_nodes())
        assert len(window) == 1

        layout.remount(create_landing_nodes())
        assert len(window) == 1

        layout.unmount()
        assert len(window) == 0


class TestFrames:
    """Tests for rendered frames."""

    def test_frames_emitted_per_tick(self, scheduler):
        layout = bubble_layout(scheduler)
        frames = []
        layout.on_frame.connect(frames.append)
        layout.mount(create_landing_nodes())

        scheduler.advance(3)

        assert [f.tick for f in frames] == [1, 2, 3]
        assert layout.latest_frame is frames[-1]
        assert len(frames[-1].nodes) == 4

    def test_rendered_bubbles_stay_inside(self, scheduler):
        layout = bubble_layout(scheduler)
        layout.mount(create_landing_nodes())

        scheduler.advance(900)

        frame = layout.latest_frame
        for visual in frame.nodes:
            assert 60 - 1e-9 <= visual.x <= 740 + 1e-9
            assert 60 - 1e-9 <= visual.y <= 540 + 1e-9

    def test_bubbles_keep_bobbing_after_settling(self, scheduler):
        layout = bubble_layout(scheduler)
        layout.mount(create_landing_nodes())
        scheduler.advance(900)

        before = [v.y for v in layout.latest_frame.nodes]
        scheduler.advance(7)
        after = [v.y for v in layout.latest_frame.nodes]

        assert not layout.simulation.hot
        assert scheduler.pending() == 1
        assert before != after

    def test_knowledge_layout_goes_idle(self, scheduler):
        layout = knowledge_layout(scheduler)
        layout.mount(knowledge_nodes(), [Link("py", "fastapi")])

        scheduler.run_until_idle()

        assert scheduler.pending() == 0
        assert layout.latest_frame is not None
        assert layout.latest_frame.node("py").level_label == "L4"

    def test_settled_knowledge_nodes_respect_collision(self, scheduler):
        layout = knowledge_layout(scheduler)
        layout.mount(knowledge_nodes(), [Link("py", "fastapi", strength=1)])

        scheduler.run_until_idle()

        nodes = layout.nodes
        for i, a in enumerate(nodes):
            for b in nodes[i + 1 :]:
                assert math.hypot(a.x - b.x, a.y - b.y) >= a.radius + b.radius


class TestPointer:
    """Tests for pointer dispatch."""

    def test_click_resolves_destination(self, scheduler):
        layout = bubble_layout(scheduler)
        layout.mount(create_landing_nodes())
        selections = []
        layout.on_select.connect(selections.append)

        down = layout.pointer(PointerKind.DOWN, 100, 100, node_id="💻")
        up = layout.pointer(PointerKind.UP, 101, 100)

        assert down.handled
        assert up.handled
        assert up.selection is not None
        assert up.selection.destination == "swe"
        assert [s.node_id for s in selections] == ["💻"]

    def test_drag_pins_node_at_pointer(self, scheduler):
        layout = bubble_layout(scheduler)
        layout.mount(create_landing_nodes())
        scheduler.advance(10)

        layout.pointer("down", 200, 200, node_id="📷")
        layout.pointer("move", 400, 300)
        scheduler.advance(2)

        node = layout.simulation.node("📷")
        assert (node.x, node.y) == (400, 300)
        assert layout.latest_frame.node("📷").dragging

        outcome = layout.pointer("up", 400, 300)
        assert outcome.handled
        assert outcome.selection is None
        assert not node.pinned

    def test_move_spawns_ripples_on_bubbles_only(self, scheduler):
        bubbles = bubble_layout(scheduler)
        knowledge = knowledge_layout(ManualFrameScheduler())
        bubbles.mount(create_landing_nodes())
        knowledge.mount(knowledge_nodes())

        bubbles.pointer("move", 10, 10)
        knowledge.pointer("move", 10, 10)
        scheduler.advance()

        assert len(bubbles.latest_frame.ripples) == 1
        assert knowledge.ripples is None

    def test_hover_surfaces_in_frame(self, scheduler):
        layout = bubble_layout(scheduler)
        layout.mount(create_landing_nodes())

        assert layout.pointer("enter", node_id="🌎").handled
        scheduler.advance()
        assert layout.latest_frame.node("🌎").hovered

        assert layout.pointer("leave", node_id="🌎").handled
        scheduler.advance()
        assert not layout.latest_frame.node("🌎").hovered

    def test_unmounted_layout_ignores_pointer(self, scheduler):
        layout = bubble_layout(scheduler)
        assert not layout.pointer("down", 0, 0, node_id="💻").handled

    def test_down_without_node_is_ignored(self, scheduler):
        layout = bubble_layout(scheduler)
        layout.mount(create_landing_nodes())
        assert not layout.pointer("down", 0, 0).handled

    def test_up_without_gesture_is_not_handled(self, scheduler):
        layout = bubble_layout(scheduler)
        layout.mount(create_landing_nodes())
        assert not layout.pointer("up", 0, 0).handled


class TestResize:
    """Tests for resizing a mounted layout."""

    def test_resize_updates_viewport_and_frame(self, scheduler):
        layout = knowledge_layout(scheduler)
        layout.mount(knowledge_nodes())

        viewport = layout.resize(600, 500)
        scheduler.advance()

        assert (viewport.width, viewport.height) == (600, 400)
        assert layout.viewport is viewport
        assert (layout.latest_frame.width, layout.latest_frame.height) == (600, 400)

    def test_window_signal_drives_resize(self, scheduler):
        window: Signal[WindowSize] = Signal("resize")
        layout = bubble_layout(scheduler, window_resized=window)
        layout.mount(create_landing_nodes())

        window.emit(WindowSize(1024, 768))

        assert (layout.viewport.width, layout.viewport.height) == (1024, 768)
        assert layout.simulation.alpha == 0.3

    def test_resize_before_mount(self, scheduler):
        layout = bubble_layout(scheduler)

        viewport = layout.resize(320, 240)
        layout.mount(create_landing_nodes())

        assert viewport.width == 320
        assert layout.simulation.forces.get("center").x == 160
