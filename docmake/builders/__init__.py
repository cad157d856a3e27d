"""
Builder components
"""

from .base_builder import BaseBuilder
from .cmake_builder import CMakeBuilder, check_project

__all__ = [
    "BaseBuilder",
    "CMakeBuilder",
    "check_project",
]
