"""Invocation ports: the capability registry and its AWS backend."""

from __future__ import annotations

from .aws_port import AwsPort
from .registry import Capability, CapabilityRegistry, build_registry
from .settings import InvokerConfig, resolve_invoker_config

__all__ = [
    "AwsPort",
    "Capability",
    "CapabilityRegistry",
    "InvokerConfig",
    "build_registry",
    "resolve_invoker_config",
]
