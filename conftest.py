"""Configures pytest further."""
import pytest

from rsastream import generate_key_pair
from rsastream import RandState

IDENTITY = "alice"


def pytest_addoption(parser):
    parser.addoption("--skip-slow", action="store_true", default=False, help="skip slower tests")
    parser.addoption("--run-extreme", action="store_true", default=False, help="run extreme value extremely slow tests")


def pytest_collection_modifyitems(config, items):
    skipdict = {}
    if config.getoption("--skip-slow"):
        skipdict["slow"] = pytest.mark.skip(reason="Slow test: needs no --skip-slow option")
    if not config.getoption("--run-extreme"):
        skipdict["extreme"] = pytest.mark.skip(reason="Extreme test: needs --run-extreme option")
    if not skipdict:
        return
    for item in items:
        for k, v in skipdict.items():
            if k in item.keywords:
                item.add_marker(v)


@pytest.fixture
def rng():
    with RandState(17092025) as state:
        yield state


@pytest.fixture(scope="session")
def keypair():
    """A 256-bit pair for `IDENTITY`, shared since generation dominates the runtime."""
    with RandState(2025) as state:
        return generate_key_pair(256, 50, state, IDENTITY)
