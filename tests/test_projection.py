"""Tests for viewport clamping, bobbing, ripples and frame projection."""

import math
import random

import pytest

from bubblegraph.model.link import Link
from bubblegraph.model.node import Node
from bubblegraph.projection import (
    Bobbing,
    Frame,
    RippleField,
    Viewport,
    clamp_axis,
    project,
    render_position,
)


def _sweep(seed: int, count: int = 200):
    """Seeded random (x, y, radius, width, height) samples."""
    rng = random.Random(seed)
    for _ in range(count):
        yield (
            rng.uniform(-2000, 4000),
            rng.uniform(-2000, 4000),
            rng.uniform(0, 120),
            rng.uniform(50, 2000),
            rng.uniform(50, 2000),
        )


class TestViewport:
    """Tests for Viewport construction."""

    def test_rejects_non_positive_size(self):
        with pytest.raises(ValueError):
            Viewport(0, 100)
        with pytest.raises(ValueError):
            Viewport(100, -5)

    def test_rejects_negative_padding(self):
        with pytest.raises(ValueError):
            Viewport(100, 100, padding=-1)

    def test_from_window_subtracts_header(self):
        viewport = Viewport.from_window(1280, 800, header_offset=100)
        assert (viewport.width, viewport.height) == (1280, 700)
        assert viewport.center == (640, 350)

    def test_from_window_never_collapses(self):
        viewport = Viewport.from_window(300, 80, header_offset=100)
        assert viewport.height == 1.0


class TestClamp:
    """Tests for the clamp."""

    def test_inside_is_unchanged(self):
        assert Viewport(800, 600).clamp(400, 300, 50) == (400, 300)

    def test_clamps_each_edge(self):
        viewport = Viewport(800, 600, padding=10)
        assert viewport.clamp(-100, -100, 50) == (60, 60)
        assert viewport.clamp(5000, 5000, 50) == (740, 540)

    def test_degenerate_axis_uses_midpoint(self):
        # 2 * (40 + 10) > 90, so the circle cannot fit horizontally
        assert clamp_axis(0, 40, 90, 10) == 45
        assert Viewport(90, 600).clamp(0, 300, 40) == (45, 300)

    @pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
    def test_circle_stays_inside_when_it_fits(self, seed):
        for x, y, radius, width, height in _sweep(seed):
            viewport = Viewport(width, height, padding=10)
            cx, cy = viewport.clamp(x, y, radius)
            if 2 * (radius + 10) <= width:
                assert radius + 10 - 1e-9 <= cx <= width - radius - 10 + 1e-9
            else:
                assert cx == width / 2
            if 2 * (radius + 10) <= height:
                assert radius + 10 - 1e-9 <= cy <= height - radius - 10 + 1e-9
            else:
                assert cy == height / 2

    @pytest.mark.parametrize("seed", [11, 12, 13])
    def test_clamp_is_idempotent(self, seed):
        for x, y, radius, width, height in _sweep(seed):
            viewport = Viewport(width, height)
            once = viewport.clamp(x, y, radius)
            assert viewport.clamp(*once, radius) == once


class TestBobbing:
    """Tests for the idle bob."""

    def test_phase_from_first_code_point(self):
        bobbing = Bobbing()
        assert bobbing.phase("💻") == pytest.approx(ord("💻") * 0.1)
        assert bobbing.phase("") == 0.0

    def test_offset_formula(self):
        bobbing = Bobbing(amplitude=2, speed=2)
        expected = 2 * math.sin(1.5 * 2 + ord("a") * 0.1)
        assert bobbing.offset("abc", 1.5) == pytest.approx(expected)

    @pytest.mark.parametrize("seed", [21, 22, 23])
    def test_offset_bounded_by_amplitude(self, seed):
        rng = random.Random(seed)
        bobbing = Bobbing()
        for _ in range(300):
            identity = chr(rng.randint(33, 0x1F64F))
            assert abs(bobbing.offset(identity, rng.uniform(0, 1000))) <= 2.0 + 1e-12


class TestRenderPosition:
    """Tests for the render-only transform."""

    def test_does_not_mutate_node(self):
        node = Node(id="💻", x=-500, y=-500, radius=50)

        render_position(node, Viewport(800, 600), elapsed=3.0, bobbing=Bobbing())

        assert (node.x, node.y) == (-500, -500)

    @pytest.mark.parametrize("seed", [31, 32, 33])
    def test_bobbed_position_stays_inside(self, seed):
        bobbing = Bobbing()
        rng = random.Random(seed)
        for x, y, radius, width, height in _sweep(seed, count=100):
            if 2 * (radius + 10) > min(width, height):
                continue
            node = Node(id=chr(rng.randint(33, 126)), x=x, y=y, radius=radius)
            rx, ry = render_position(node, Viewport(width, height), rng.uniform(0, 100), bobbing)
            assert radius + 10 - 1e-9 <= rx <= width - radius - 10 + 1e-9
            assert radius + 10 - 1e-9 <= ry <= height - radius - 10 + 1e-9

    def test_bob_applied_before_clamp(self):
        node = Node(id="a", x=400, y=300, radius=50)
        bobbing = Bobbing()

        _, y = render_position(node, Viewport(800, 600), elapsed=0.7, bobbing=bobbing)

        assert y == pytest.approx(300 + bobbing.offset("a", 0.7))


class TestRippleField:
    """Tests for cursor ripples."""

    def test_spawn_within_ranges(self):
        field = RippleField(rng=random.Random(5))
        ripple = field.spawn(10, 20)

        assert 50 <= ripple.max_radius <= 80
        assert 2 <= ripple.speed <= 4
        assert ripple.opacity == 0.6

    def test_bounded(self):
        field = RippleField(max_ripples=3, rng=random.Random(1))
        for i in range(10):
            field.spawn(i, i)
        assert len(field) == 3

    def test_ripples_fade_out(self):
        field = RippleField(rng=random.Random(1))
        field.spawn(0, 0)

        for _ in range(40):
            field.advance()

        assert len(field) == 0


class TestProject:
    """Tests for frame projection."""

    def test_frame_contents(self):
        nodes = [
            Node(id="a", x=100, y=100, radius=30, category="programming"),
            Node(id="b", x=300, y=100, radius=30),
        ]
        links = [Link("a", "b", strength=4), Link("a", "ghost")]

        frame = project(
            nodes,
            links,
            Viewport(800, 600),
            tick=7,
            time=1.5,
            alpha=0.2,
            hovered="a",
            dragging=["b"],
        )

        assert isinstance(frame, Frame)
        assert (frame.tick, frame.time, frame.alpha) == (7, 1.5, 0.2)
        assert [n.id for n in frame.nodes] == ["a", "b"]
        assert frame.node("a").hovered and not frame.node("a").dragging
        assert frame.node("b").dragging
        assert frame.node("a").color == "#3B82F6"
        assert len(frame.links) == 1
        link = frame.links[0]
        assert (link.x1, link.y1, link.x2, link.y2) == (100, 100, 300, 100)
        assert link.stroke_width == 2.0

    def test_links_follow_clamped_positions(self):
        nodes = [Node(id="a", x=-100, y=300, radius=40), Node(id="b", x=400, y=300, radius=40)]

        frame = project(nodes, [Link("a", "b")], Viewport(800, 600))

        assert frame.links[0].x1 == 50
        assert frame.node("a").x == 50

    def test_knowledge_decorations(self):
        node = Node(id="py", radius=80, data={"experience_level": 8, "blog_post_count": 3})

        visual = project([node], [], Viewport(800, 600)).nodes[0]

        assert visual.level_label == "L8"
        assert visual.caption == "3 posts"
        assert visual.ring_width == 4.0
        assert visual.font_size == pytest.approx(80 / 3)

    def test_plain_bubbles_have_no_decorations(self):
        visual = project([Node(id="📷", radius=50)], [], Viewport(800, 600)).nodes[0]

        assert (visual.level_label, visual.caption, visual.ring_width) == ("", "", 0.0)

    def test_to_dict_is_plain_data(self):
        frame = project([Node(id="a", x=100, y=100)], [], Viewport(800, 600), tick=1)
        data = frame.to_dict()

        assert data["tick"] == 1
        assert data["nodes"][0]["id"] == "a"
        assert data["links"] == []
