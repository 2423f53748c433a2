"""Test configuration for importing ``printmax`` from a source checkout."""

import os
import sys

# Make ``import printmax`` work without installing the package, the same as
# running ``python -m pytest`` from the repository root.
ROOT_DIR = os.path.abspath(os.path.dirname(__file__))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)
