"""Style cascade resolution."""

from .cascade import StyleCascadeResolver, section_for

__all__ = ["StyleCascadeResolver", "section_for"]
