"""Projection model, edge detector and slip assembly."""

from slipsmith.engine.edge import EdgeConfig, EdgeDetector, edge_probability
from slipsmith.engine.projection import ProjectionConfig, ProjectionEngine
from slipsmith.engine.slip import SlipConfig, SlipService, select_events

__all__ = [
    "EdgeConfig",
    "EdgeDetector",
    "ProjectionConfig",
    "ProjectionEngine",
    "SlipConfig",
    "SlipService",
    "edge_probability",
    "select_events",
]
