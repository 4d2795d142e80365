"""Global configuration for pytest"""

import os
import sys

import numpy as np
import pytest


# Make the test helpers importable from all test directories
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "tests", "text"))


@pytest.fixture(autouse=True, scope="session")
def numerical_exceptions():
    """
    Ensure any numerical errors raise a warning in our test suite
    The point is that we enforce such cases to be handled explicitly in our code
    Preferably using local `with np.errstate(...)` constructs
    """
    np.seterr(all="raise")
