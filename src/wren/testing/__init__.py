"""Test utilities for wren applications.

Provides an in-process test client and JSON assertions::

    from wren.testing import TestClient, assert_error, assert_json
"""

from wren.testing.assertions import assert_error, assert_json
from wren.testing.client import TestClient

__all__ = [
    "TestClient",
    "assert_error",
    "assert_json",
]
