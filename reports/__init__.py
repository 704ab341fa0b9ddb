"""
Report generators for extracted P4 structure.
"""

from reports.description_renderer import DescriptionRenderer

__all__ = ["DescriptionRenderer"]
