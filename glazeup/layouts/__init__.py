"""
Layout Reconciliation

Builds configured split layouts in a live GlazeWM workspace and verifies
the result.
"""

from .layout_base import RatioPolicy, TilingDirection, normalize_sizes
from .layout_builder import (
    LayoutBuilder,
    RatioContainer,
    RatioResult,
    collect_ratio_containers,
)
from .layout_verifier import (
    Comparison,
    LayoutVerifier,
    Structure,
    compare_ratios,
    compare_structure,
    config_structure,
    live_structure,
)

__all__ = [
    # Base
    "RatioPolicy",
    "TilingDirection",
    "normalize_sizes",
    # Builder
    "LayoutBuilder",
    "RatioContainer",
    "RatioResult",
    "collect_ratio_containers",
    # Verifier
    "Comparison",
    "LayoutVerifier",
    "Structure",
    "compare_ratios",
    "compare_structure",
    "config_structure",
    "live_structure",
]
