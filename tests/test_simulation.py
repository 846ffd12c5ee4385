"""Tests for the simulation stepper."""

import itertools
import math

import pytest
from conftest import make_node, make_simulation

from bubblegraph.engine.forces import BUBBLE_FORCES, KNOWLEDGE_FORCES, ForceSet, build_forces
from bubblegraph.engine.scheduler import ManualFrameScheduler
from bubblegraph.engine.simulation import Simulation, TickEvent
from bubblegraph.model import Link


def ring_nodes(count: int = 4, radius: float = 50.0) -> list:
    """Nodes on a small ring around (400, 300)."""
    nodes = []
    for i in range(count):
        angle = i / count * 2 * math.pi
        nodes.append(
            make_node(
                f"n{i}", 400 + 180 * math.cos(angle), 300 + 180 * math.sin(angle), radius
            )
        )
    return nodes


class TestTick:
    """Tests for synchronous ticks."""

    def test_alpha_decays_toward_target(self, scheduler):
        sim = make_simulation(ring_nodes(), scheduler)

        sim.tick()

        assert sim.alpha == pytest.approx(0.99)
        assert sim.tick_count == 1

    def test_velocity_decay_and_integration(self, scheduler):
        node = make_node("solo", 0, 0)
        node.vx = 10.0
        sim = Simulation([node], ForceSet(), scheduler)

        sim.tick()

        assert node.vx == pytest.approx(6.0)
        assert node.x == pytest.approx(6.0)

    def test_pinned_node_stays_at_pin(self, scheduler):
        nodes = ring_nodes()
        nodes[0].pin(400, 300)
        sim = make_simulation(nodes, scheduler)

        for _ in range(50):
            sim.tick()
            assert (nodes[0].x, nodes[0].y) == (400, 300)
            assert (nodes[0].vx, nodes[0].vy) == (0.0, 0.0)

    def test_single_axis_pin(self, scheduler):
        node = make_node("a", 10, 10)
        node.vx = node.vy = 5.0
        node.fx = 50.0
        sim = Simulation([node], ForceSet(), scheduler)

        sim.tick()

        assert node.x == 50.0
        assert node.y == pytest.approx(13.0)

    def test_empty_node_set_is_noop(self, scheduler):
        sim = make_simulation([], scheduler)

        assert sim.tick(10) == 0.0
        assert sim.tick_count == 0


class TestFrameLoop:
    """Tests for scheduler-driven stepping."""

    def test_settles_and_goes_idle(self, scheduler):
        nodes = ring_nodes()
        sim = make_simulation(nodes, scheduler)
        ended = []
        sim.on_end.connect(ended.append)

        sim.start()
        frames = scheduler.run_until_idle()

        assert 0 < frames < 10_000
        assert sim.alpha < sim.alpha_min
        assert not sim.running
        assert not sim.hot
        assert ended == [sim]

    def test_settled_nodes_do_not_overlap(self, scheduler):
        nodes = ring_nodes(radius=50)
        sim = make_simulation(nodes, scheduler)

        sim.start()
        scheduler.run_until_idle()

        for a, b in itertools.combinations(nodes, 2):
            assert math.hypot(a.x - b.x, a.y - b.y) >= a.radius + b.radius

    def test_settles_near_viewport_centre(self, scheduler):
        nodes = ring_nodes()
        sim = make_simulation(nodes, scheduler)

        sim.start()
        scheduler.run_until_idle()

        cx = sum(n.x for n in nodes) / len(nodes)
        cy = sum(n.y for n in nodes) / len(nodes)
        assert cx == pytest.approx(400, abs=5)
        assert cy == pytest.approx(300, abs=5)

    def test_tick_events_carry_state(self, scheduler):
        sim = make_simulation(ring_nodes(), scheduler)
        events: list[TickEvent] = []
        sim.on_tick.connect(events.append)

        sim.start()
        scheduler.advance(3)

        assert [e.tick for e in events] == [1, 2, 3]
        assert all(e.ticked for e in events)
        assert events[-1].alpha == pytest.approx(0.99**3)

    def test_start_on_empty_set_requests_nothing(self, scheduler):
        sim = make_simulation([], scheduler)

        sim.start()
        sim.reheat()

        assert scheduler.pending() == 0
        assert not sim.running

    def test_only_one_frame_queued(self, scheduler):
        sim = make_simulation(ring_nodes(), scheduler)

        sim.start()
        sim.restart()
        sim.reheat(0.5)

        assert scheduler.pending() == 1

    def test_knowledge_preset_cools_faster(self):
        bubble_sched, knowledge_sched = ManualFrameScheduler(), ManualFrameScheduler()
        bubble = make_simulation(ring_nodes(), bubble_sched)
        knowledge = make_simulation(ring_nodes(), knowledge_sched, config=KNOWLEDGE_FORCES)

        bubble.start()
        knowledge.start()

        assert knowledge_sched.run_until_idle() < bubble_sched.run_until_idle()

    @pytest.mark.parametrize(
        ("config", "links"),
        [
            (BUBBLE_FORCES, []),
            (KNOWLEDGE_FORCES, [Link("n0", "n1"), Link("n1", "n2", strength=8), Link("n2", "n3")]),
        ],
        ids=["bubble", "knowledge"],
    )
    def test_settled_step_is_negligible(self, scheduler, config, links):
        nodes = ring_nodes()
        forces = build_forces(config, 800, 600, links)
        sim = Simulation(nodes, forces, scheduler, config=config, seed=7)

        sim.start()
        scheduler.run_until_idle()

        assert sim.tick() < 0.5


class TestStop:
    """Tests for stop / restart semantics."""

    def test_stop_is_idempotent(self, scheduler):
        sim = make_simulation(ring_nodes(), scheduler)

        sim.stop()
        sim.start()
        sim.stop()
        sim.stop()

        assert scheduler.pending() == 0
        assert scheduler.advance(5) == 0

    def test_stop_from_tick_listener(self, scheduler):
        sim = make_simulation(ring_nodes(), scheduler)
        sim.on_tick.connect(lambda event: sim.stop())

        sim.start()
        scheduler.advance()

        assert scheduler.pending() == 0
        assert sim.tick_count == 1

    def test_reheat_from_end_listener_keeps_single_loop(self, scheduler):
        sim = make_simulation(ring_nodes(), scheduler)
        reheats = []

        def again(s: Simulation) -> None:
            if not reheats:
                reheats.append(s.alpha)
                s.reheat(0.3)

        sim.on_end.connect(again)
        sim.start()
        scheduler.run_until_idle()

        assert len(reheats) == 1
        assert scheduler.pending() == 0
        assert sim.alpha < sim.alpha_min

    def test_reheat_after_settling(self, scheduler):
        sim = make_simulation(ring_nodes(), scheduler)
        sim.start()
        scheduler.run_until_idle()

        sim.reheat(0.3)

        assert sim.alpha == 0.3
        assert sim.running
        assert sim.hot


class TestAlphaTarget:
    """Tests for drag-style alpha targets."""

    def test_alpha_converges_to_target(self, scheduler):
        sim = make_simulation(ring_nodes(), scheduler)
        sim.start()
        scheduler.run_until_idle()

        sim.set_alpha_target(0.3)
        sim.restart()
        scheduler.advance(2000)

        assert sim.alpha == pytest.approx(0.3, abs=1e-3)
        assert sim.running

    def test_negative_target_clamped(self, scheduler):
        sim = make_simulation(ring_nodes(), scheduler)
        sim.set_alpha_target(-1.0)
        assert sim.alpha_target == 0.0


class TestKeepAlive:
    """Tests for loops kept alive after cooling."""

    def test_keeps_emitting_without_force_work(self, scheduler):
        nodes = ring_nodes()
        sim = make_simulation(nodes, scheduler, keep_alive=True)
        events: list[TickEvent] = []
        ended = []
        sim.on_end.connect(ended.append)

        sim.start()
        scheduler.run_until_idle(max_frames=2000)
        positions = [(n.x, n.y) for n in nodes]
        ticks = sim.tick_count
        sim.on_tick.connect(events.append)
        scheduler.advance(10)

        assert scheduler.pending() == 1
        assert len(ended) == 1
        assert sim.tick_count == ticks
        assert [(n.x, n.y) for n in nodes] == positions
        assert len(events) == 10
        assert not any(e.ticked for e in events)
