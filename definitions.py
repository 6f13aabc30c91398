"""
Module to hold some top-level constants
"""

# Import packages
import os
from pathlib import Path

# an absolute locator to the top level of the project, used to find the default run config
PROJECT_ROOT = Path(os.path.dirname(os.path.abspath(__file__)))
