from __future__ import annotations

from typing import Any

import pytest

from rewire.resolver import Resolver

_REWIRE_MARKER = "rewire"


def pytest_configure(config: pytest.Config) -> None:
    """Register the ``rewire`` marker so strict-marker runs accept it."""
    config.addinivalue_line(
        "markers",
        f"{_REWIRE_MARKER}(scalars=None, aliases=None): seed the rewire_resolver fixture",
    )


@pytest.fixture()
def rewire_resolver(request: pytest.FixtureRequest) -> Resolver:
    """Create a per-test resolver.

    The fixture is function-scoped, so shared instances and registrations are
    isolated between tests. Seed it declaratively with the ``rewire`` marker:

        @pytest.mark.rewire(scalars={"speed": 100}, aliases={Engine: ElectricEngine})
        def test_taxi(rewire_resolver: Resolver) -> None:
            ...

    Markers closer to the test override keys from markers further away.

    Returns:
        A new ``Resolver`` instance.

    """
    scalars: dict[str, Any] = {}
    aliases: dict[Any, Any] = {}
    # iter_markers yields the closest marker first.
    for marker in reversed(list(request.node.iter_markers(_REWIRE_MARKER))):
        scalars.update(marker.kwargs.get("scalars") or {})
        aliases.update(marker.kwargs.get("aliases") or {})
    return Resolver(scalars=scalars, aliases=aliases)
