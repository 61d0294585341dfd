import sys

from .base import *  # noqa: F403

RUNNING_PYTEST = "pytest" in sys.modules or any("pytest" in arg for arg in sys.argv)

if RUNNING_PYTEST:
    from .test import *  # noqa: F403
