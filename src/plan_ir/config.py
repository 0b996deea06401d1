"""Runtime limits for the codec and validation layer."""

from __future__ import annotations

from typing import Annotated

import msgspec

from serde_msgspec import StructBaseStrict
from utils.env_utils import env_bool, env_int

DEFAULT_MAX_DEPTH = 256
ENV_MAX_DEPTH = "PLANWIRE_MAX_DEPTH"
ENV_ALLOW_TEST_FIXTURES = "PLANWIRE_ALLOW_TEST_FIXTURES"


class PlanIRConfig(StructBaseStrict):
    """Limits applied by ``encode``, ``decode`` and ``validate``.

    ``max_depth`` counts IR nodes (relations, read sources, expressions,
    literals and data types) from the root, which is at depth 1.
    ``allow_test_fixtures`` lets the ``unknown`` relation through
    validation.
    """

    max_depth: Annotated[int, msgspec.Meta(ge=1)] = DEFAULT_MAX_DEPTH
    allow_test_fixtures: bool = False

    def __post_init__(self) -> None:
        """Reject a non-positive depth on direct construction too.

        Raises
        ------
        ValueError
            Raised when ``max_depth`` is below 1.
        """
        if self.max_depth < 1:
            msg = f"max_depth must be at least 1, got {self.max_depth}."
            raise ValueError(msg)

    @classmethod
    def from_env(cls) -> PlanIRConfig:
        """Build a config from ``PLANWIRE_*`` environment variables.

        Returns
        -------
        PlanIRConfig
            Config with environment overrides applied.
        """
        return cls(
            max_depth=env_int(ENV_MAX_DEPTH, default=DEFAULT_MAX_DEPTH, minimum=1),
            allow_test_fixtures=env_bool(ENV_ALLOW_TEST_FIXTURES, default=False),
        )


DEFAULT_CONFIG = PlanIRConfig()


def resolve_config(config: PlanIRConfig | None) -> PlanIRConfig:
    """Return ``config`` or the default limits.

    Returns
    -------
    PlanIRConfig
        Effective configuration.
    """
    return DEFAULT_CONFIG if config is None else config


__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_MAX_DEPTH",
    "ENV_ALLOW_TEST_FIXTURES",
    "ENV_MAX_DEPTH",
    "PlanIRConfig",
    "resolve_config",
]
