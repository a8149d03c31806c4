"""Fixtures for the runnable examples.

Each example directory holds an ``app.py`` and a ``test_app.py``. The
app module is re-executed for every test so rate-limit tables and the
frozen state never leak between tests.
"""

import runpy
from pathlib import Path

import pytest

from wren.app import App


@pytest.fixture
def example_app(request: pytest.FixtureRequest) -> App:
    """The ``app`` object from the ``app.py`` next to the requesting test."""
    namespace = runpy.run_path(str(Path(request.path).with_name("app.py")), run_name="example_app")
    return namespace["app"]
