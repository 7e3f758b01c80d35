import sys
import os
import logging

import pytest

# Ensure src/ is on sys.path so the package is importable without installing
SRC = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src'))
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from avif_optimizer.infrastructure.system import FixedResources  # noqa: E402


@pytest.fixture
def host():
    """A deterministic 8-CPU host with 8 GiB available."""
    return FixedResources(cpus=8, memory=8 * 1024 ** 3)


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers bound to captured streams once a test is done."""
    yield
    package_logger = logging.getLogger('avif_optimizer')
    package_logger.handlers.clear()
    package_logger.setLevel(logging.WARNING)
