"""
setup.py for docmake

Runtime Requirements:
- CMake >= 3.21 (for --install-prefix), Ninja optional
- Slurm client tools for dropin/sq, nccmp for cmpnc4, ripgrep for rgi

Environment:
- CMAKE_BUILD_LOCATION and CMAKE_INSTALL_LOCATION select where build and
  install trees live ('pwd' keeps them next to the source checkout)
- DOCMAKE_NUM_JOBS sets the default parallel job count
- DOCMAKE_CONFIG points at an optional YAML defaults file
"""

from pathlib import Path
from setuptools import setup, find_packages

# Read README for long description
readme_path = Path("README.md")
long_description = ""
if readme_path.exists():
    with open(readme_path, "r", encoding="utf-8") as f:
        long_description = f.read()

setup(
    name="docmake",
    version="1.0.0",
    description="Out-of-tree CMake build helpers for GEOS development on shared HPC systems",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["docmake", "docmake.*"]),
    entry_points={
        "console_scripts": [
            "docmake=docmake.main:main",
            "makebench=docmake.tools:makebench_main",
            "cmpnc4=docmake.tools:cmpnc4_main",
            "rgi=docmake.tools:rgi_main",
            "dropin=docmake.slurm:dropin_main",
            "sq=docmake.slurm:sq_main",
        ],
    },
    zip_safe=False,
    python_requires=">=3.10",
    install_requires=[
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
        "dev": [
            "pytest",
            "pytest-cov",
            "black",
            "flake8",
            "mypy",
            "types-PyYAML",
        ]
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Operating System :: POSIX :: Linux",
        "Topic :: Software Development :: Build Tools",
    ],
)
