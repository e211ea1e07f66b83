"""
Models module for the chart compiler.

Contains the chart spec schema, enumerations and diagnostic records.
"""

from .data_models import (
    ChartKind,
    ValueFormat,
    Surface,
    SeriesSpec,
    ChartSpec,
    Diagnostic,
    CompileResult,
    normalize_kind,
    SELF_DERIVING_KINDS,
    POSITIONAL_FALLBACK_KINDS,
    DOWNSAMPLED_KINDS,
)

__all__ = [
    'ChartKind',
    'ValueFormat',
    'Surface',
    'SeriesSpec',
    'ChartSpec',
    'Diagnostic',
    'CompileResult',
    'normalize_kind',
    'SELF_DERIVING_KINDS',
    'POSITIONAL_FALLBACK_KINDS',
    'DOWNSAMPLED_KINDS',
]
