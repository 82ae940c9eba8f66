"""Fixtures for command tests: a fully built node rooted at the test home."""

import pytest
import typer

from nodekit.components import default_components, default_depinject_config
from nodekit.node.builder import (
    new,
    with_components,
    with_depinject_config,
    with_description,
    with_name,
)


@pytest.fixture
def root_cmd() -> typer.Typer:
    """Provide the root command of a freshly built default node."""
    node = new(
        with_name("beacond"),
        with_description("beacond test node"),
        with_depinject_config(default_depinject_config()),
        with_components(*default_components()),
    ).build()
    assert node.root_cmd is not None
    return node.root_cmd
