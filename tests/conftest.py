import os
from pathlib import Path

import pytest

# Test layer (directory name) -> marker applied to every test under it.
LAYER_MARKERS = {
    "domain": pytest.mark.domain,
    "application": pytest.mark.application,
    "integration": pytest.mark.integration,
    "bdd": pytest.mark.bdd,
}


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="domain.toml overlay to run the storefront against (sets PROTEAN_ENV)",
    )


def pytest_sessionstart(session):
    """Select the config overlay before the storefront domain is initialized."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Mark tests by layer; HTTP tests count as slow unless marked fast."""
    for item in items:
        parts = Path(str(item.fspath)).parts
        for layer, marker in LAYER_MARKERS.items():
            if layer in parts:
                item.add_marker(marker)
                break
        if "integration" in parts and item.get_closest_marker("fast") is None:
            item.add_marker(pytest.mark.slow)
