"""
Pipeline module for the chart compiler.

Contains surface dispatch and the sequential batch renderer.
"""

from .orchestrator import (
    ChartRenderOutcome,
    compile_chart,
    render_all_charts,
)

__all__ = [
    'ChartRenderOutcome',
    'compile_chart',
    'render_all_charts',
]
