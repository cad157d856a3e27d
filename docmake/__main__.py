"""Allows ``python -m docmake``"""
import sys

from .main import main

sys.exit(main())
