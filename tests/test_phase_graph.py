"""Unit tests for the phase graph (legal moves and per-edge actions)."""

import pytest

from tripnav.domain import phase_graph
from tripnav.domain.enums import (
    PHASE_TRANSITIONS,
    CameraMode,
    NavigationPhase,
    RouteLeg,
    TransitionActionType as A,
)

P = NavigationPhase

VALID_EDGES = [(f, t) for f, targets in PHASE_TRANSITIONS.items() for t in targets]
INVALID_EDGES = [
    (f, t)
    for f in NavigationPhase
    for t in NavigationPhase
    if f is not t and t not in PHASE_TRANSITIONS[f]
]


class TestAdjacency:
    def test_forward_chain(self):
        assert phase_graph.is_valid_transition(P.TO_PICKUP, P.AT_PICKUP)
        assert phase_graph.is_valid_transition(P.AT_PICKUP, P.PICKING_UP)
        assert phase_graph.is_valid_transition(P.PICKING_UP, P.TO_DESTINATION)
        assert phase_graph.is_valid_transition(P.TO_DESTINATION, P.AT_DESTINATION)
        assert phase_graph.is_valid_transition(P.AT_DESTINATION, P.COMPLETED)

    def test_every_phase_can_complete_early(self):
        for phase in NavigationPhase:
            if phase is not P.COMPLETED:
                assert phase_graph.is_valid_transition(phase, P.COMPLETED)

    def test_no_skipping_or_going_back(self):
        assert not phase_graph.is_valid_transition(P.TO_PICKUP, P.TO_DESTINATION)
        assert not phase_graph.is_valid_transition(P.TO_DESTINATION, P.TO_PICKUP)

    def test_completed_is_terminal(self):
        assert phase_graph.is_terminal_phase(P.COMPLETED)
        assert phase_graph.get_valid_next_phases(P.COMPLETED) == []
        assert not any(phase_graph.is_valid_transition(P.COMPLETED, p) for p in NavigationPhase)

    def test_valid_next_phases_preserve_order(self):
        assert phase_graph.get_valid_next_phases(P.TO_PICKUP) == [P.AT_PICKUP, P.COMPLETED]


class TestTransitionConfigs:
    @pytest.mark.parametrize("edge", VALID_EDGES)
    def test_every_valid_edge_has_a_config(self, edge):
        config = phase_graph.get_transition_config(*edge)
        assert config is not None
        assert (config.from_phase, config.to_phase) == edge
        assert config.actions

    @pytest.mark.parametrize("edge", INVALID_EDGES)
    def test_invalid_edges_have_no_config(self, edge):
        assert phase_graph.get_transition_config(*edge) is None

    def test_pickup_to_destination_handoff(self):
        config = phase_graph.get_transition_config(P.PICKING_UP, P.TO_DESTINATION)
        assert [a.type for a in config.actions] == [
            A.CLEAR_ROUTE,
            A.CALCULATE_ROUTE,
            A.UPDATE_GEOFENCES,
            A.UPDATE_CAMERA,
            A.RESTART_NAVIGATION,
            A.ANNOUNCE_INSTRUCTION,
        ]
        assert set(config.required_context) == {"pickup_location", "destination_location"}
        assert config.actions[1].payload["type"] is RouteLeg.PICKUP_TO_DESTINATION
        assert dict(config.actions[2].payload) == {"hide_pickup": True, "show_destination": True}
        assert config.actions[3].payload["mode"] is CameraMode.SHOW_FULL_ROUTE

    def test_arrival_requires_driver_location(self):
        config = phase_graph.get_transition_config(P.TO_PICKUP, P.AT_PICKUP)
        assert "driver_location" in config.required_context

    def test_payloads_are_read_only(self):
        config = phase_graph.get_transition_config(P.PICKING_UP, P.TO_DESTINATION)
        with pytest.raises(TypeError):
            config.actions[1].payload["type"] = RouteLeg.DRIVER_TO_PICKUP


class TestHelpers:
    def test_description_known_edge(self):
        assert (
            phase_graph.get_transition_description(P.PICKING_UP, P.TO_DESTINATION)
            == "Starting navigation to destination"
        )

    def test_description_fallback(self):
        assert phase_graph.get_transition_description(P.TO_PICKUP, P.COMPLETED) == (
            "Transitioning from to-pickup to completed"
        )

    def test_only_handoff_recalculates_route(self):
        recalculating = [e for e in VALID_EDGES if phase_graph.requires_route_recalculation(*e)]
        assert recalculating == [(P.PICKING_UP, P.TO_DESTINATION)]

    def test_geofence_update_edges(self):
        assert phase_graph.requires_geofence_update(P.PICKING_UP, P.TO_DESTINATION)
        assert phase_graph.requires_geofence_update(P.AT_DESTINATION, P.COMPLETED)
        assert not phase_graph.requires_geofence_update(P.TO_PICKUP, P.AT_PICKUP)

    def test_expected_duration(self):
        assert phase_graph.expected_transition_duration_ms(P.PICKING_UP, P.TO_DESTINATION) == 8000
        assert phase_graph.expected_transition_duration_ms(P.TO_PICKUP, P.COMPLETED) == 5000
