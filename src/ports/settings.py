"""Invoker configuration and its precedence resolution.

Sources, strongest first: CLI overrides (``CLI_*`` keys injected by the
command line), the process environment, ``config.toml`` and built-in
defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from project_config import get_section

_DEFAULT_CONNECT_TIMEOUT_S = 10.0
_DEFAULT_READ_TIMEOUT_S = 60.0
_DEFAULT_MAX_ATTEMPTS = 1


@dataclass(frozen=True)
class InvokerConfig:
    """Everything the invocation port needs, passed explicitly to its constructor."""

    region: Optional[str] = None
    profile: Optional[str] = None
    api_versions: Mapping[str, str] = field(default_factory=dict)
    service_aliases: Mapping[str, str] = field(default_factory=dict)
    connect_timeout_s: float = _DEFAULT_CONNECT_TIMEOUT_S
    read_timeout_s: float = _DEFAULT_READ_TIMEOUT_S
    max_attempts: int = _DEFAULT_MAX_ATTEMPTS
    decision_source: Mapping[str, str] = field(default_factory=dict)


def _invoker_section() -> Dict[str, Any]:
    section = get_section("invoker", default={})
    return dict(section) if isinstance(section, dict) else {}


def _pick_text(
    env: Mapping[str, str], cli_key: str, env_key: str, policy: Mapping[str, Any], policy_key: str
) -> tuple[Optional[str], str]:
    if env.get(cli_key):
        return env[cli_key], "cli"
    if env.get(env_key):
        return env[env_key], "env"
    value = policy.get(policy_key)
    if isinstance(value, str) and value:
        return value, "config"
    return None, "default"


def _pick_number(
    env: Mapping[str, str],
    cli_key: str,
    env_key: str,
    policy: Mapping[str, Any],
    policy_key: str,
    default: float,
) -> tuple[float, str]:
    for key, source in ((cli_key, "cli"), (env_key, "env")):
        raw = env.get(key)
        if raw is None:
            continue
        try:
            value = float(raw)
        except (TypeError, ValueError):
            continue
        if value > 0:
            return value, source

    raw_policy = policy.get(policy_key)
    if raw_policy is not None:
        try:
            value = float(raw_policy)
        except (TypeError, ValueError):
            value = 0.0
        if value > 0:
            return value, "config"
    return default, "default"


def resolve_invoker_config(
    api_versions: Mapping[str, str] | None,
    env: Mapping[str, str],
) -> InvokerConfig:
    """Build the :class:`InvokerConfig` for a run."""

    policy = _invoker_section()
    sources: Dict[str, str] = {}

    region, sources["region"] = _pick_text(env, "CLI_AWS_REGION", "AWS_REGION", policy, "region")
    profile, sources["profile"] = _pick_text(env, "CLI_AWS_PROFILE", "AWS_PROFILE", policy, "profile")
    connect, sources["connect_timeout_s"] = _pick_number(
        env,
        "CLI_INVOKER_CONNECT_TIMEOUT",
        "INVOKER_CONNECT_TIMEOUT",
        policy,
        "connect_timeout_s",
        _DEFAULT_CONNECT_TIMEOUT_S,
    )
    read, sources["read_timeout_s"] = _pick_number(
        env,
        "CLI_INVOKER_READ_TIMEOUT",
        "INVOKER_READ_TIMEOUT",
        policy,
        "read_timeout_s",
        _DEFAULT_READ_TIMEOUT_S,
    )

    try:
        max_attempts = max(1, int(policy.get("max_attempts", _DEFAULT_MAX_ATTEMPTS)))
    except (TypeError, ValueError):
        max_attempts = _DEFAULT_MAX_ATTEMPTS

    aliases = policy.get("service_aliases", {})
    return InvokerConfig(
        region=region,
        profile=profile,
        api_versions={str(k).lower(): str(v) for k, v in (api_versions or {}).items()},
        service_aliases={str(k).lower(): str(v) for k, v in aliases.items()} if isinstance(aliases, dict) else {},
        connect_timeout_s=connect,
        read_timeout_s=read,
        max_attempts=max_attempts,
        decision_source=sources,
    )


__all__ = ["InvokerConfig", "resolve_invoker_config"]
