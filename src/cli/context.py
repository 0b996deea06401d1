"""Run context for CLI command injection."""

from __future__ import annotations

from dataclasses import dataclass, field

from plan_ir.config import PlanIRConfig


@dataclass(frozen=True)
class RunContext:
    """Injected run context for CLI commands.

    Parameters
    ----------
    log_level
        Logging level applied to the invocation.
    config
        Codec and validation limits for the invocation.
    """

    log_level: str
    config: PlanIRConfig = field(default_factory=PlanIRConfig)


def context_config(run_context: RunContext | None) -> PlanIRConfig:
    """Return the limits carried by ``run_context`` or the environment.

    Returns
    -------
    PlanIRConfig
        Effective limits for a command.
    """
    if run_context is None:
        return PlanIRConfig.from_env()
    return run_context.config


__all__ = ["RunContext", "context_config"]
