import logging
from typing import Iterator

import pytest


@pytest.fixture(autouse=True)
def propagate_package_logs() -> Iterator[None]:
    """Let caplog see records from the ``thermopos`` logger (it does not propagate)."""
    package_logger = logging.getLogger("thermopos")
    previous = package_logger.propagate
    package_logger.propagate = True
    yield
    package_logger.propagate = previous
