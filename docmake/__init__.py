"""
docmake
Out-of-tree CMake build helpers for large scientific codebases on shared
HPC systems
"""

__version__ = "1.0.0"

from .main import DocMake, main

__all__ = ["DocMake", "main", "__version__"]
