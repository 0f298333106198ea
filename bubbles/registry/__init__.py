"""
Registry module for the bubble visualization.

This package contains the registry facade the presentation layer uses
to pick unique content for new bubbles.
"""

from bubbles.registry.bubble_registry import BubbleRegistry, RegistryStats

__all__ = ["BubbleRegistry", "RegistryStats"]
