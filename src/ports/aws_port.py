"""AWS invocation port built on boto3.

Command files name operations the way the JavaScript SDK does
(``objectType: "Lambda", method: "createFunction"``).  The port maps them to
boto3 clients (``lambda``) and snake_case operations (``create_function``).
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional

import boto3
from botocore import xform_name
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, UnknownServiceError
from botocore.response import StreamingBody

from contracts.errors import ConfigError

from .registry import Handler
from .settings import InvokerConfig

_LOGGER = logging.getLogger(__name__)

# JavaScript SDK class names whose boto3 service name is not simply lower-cased.
SERVICE_ALIASES: Dict[str, str] = {
    "applicationautoscaling": "application-autoscaling",
    "cloudwatchevents": "events",
    "cloudwatchlogs": "logs",
    "cognitoidentity": "cognito-identity",
    "cognitoidentityserviceprovider": "cognito-idp",
    "cognitosync": "cognito-sync",
    "configservice": "config",
    "eventbridge": "events",
    "iotdata": "iot-data",
    "lexmodelbuildingservice": "lex-models",
    "lexruntime": "lex-runtime",
    "marketplacemetering": "meteringmarketplace",
    "sagemakerruntime": "sagemaker-runtime",
    "servicequotas": "service-quotas",
    "transcribeservice": "transcribe",
}


def service_name(object_type: str, aliases: Mapping[str, str] | None = None) -> str:
    key = object_type.lower()
    if aliases and key in aliases:
        return aliases[key]
    return SERVICE_ALIASES.get(key, key)


def operation_name(method: str) -> str:
    return xform_name(method)


def _read_streams(response: Any) -> Any:
    if not isinstance(response, dict):
        return response
    return {
        key: value.read() if isinstance(value, StreamingBody) else value
        for key, value in response.items()
    }


class AwsPort:
    """Binds command capabilities to boto3 client operations.

    One client is created per service and reused for the whole run.  SDK
    retries are disabled by default (``max_attempts = 1``): a failed call
    fails its command.
    """

    def __init__(self, config: InvokerConfig, *, session: Any = None) -> None:
        self.config = config
        if session is None:
            try:
                session = boto3.session.Session(
                    region_name=config.region,
                    profile_name=config.profile,
                )
            except BotoCoreError as exc:
                raise ConfigError("aws.session_failed", str(exc)) from exc
        self._session = session
        self._clients: Dict[str, Any] = {}

    def _client_config(self) -> BotoConfig:
        return BotoConfig(
            connect_timeout=self.config.connect_timeout_s,
            read_timeout=self.config.read_timeout_s,
            retries={"total_max_attempts": self.config.max_attempts, "mode": "standard"},
        )

    def _api_version(self, object_type: str, service: str) -> Optional[str]:
        versions = self.config.api_versions
        return versions.get(object_type.lower()) or versions.get(service)

    def client(self, object_type: str) -> Any:
        service = service_name(object_type, self.config.service_aliases)
        cached = self._clients.get(service)
        if cached is not None:
            return cached
        try:
            client = self._session.client(
                service,
                api_version=self._api_version(object_type, service),
                config=self._client_config(),
            )
        except UnknownServiceError as exc:
            raise ConfigError("aws.unknown_service", f"{object_type} ({service})") from exc
        self._clients[service] = client
        return client

    def bind(self, object_type: str, method: str) -> Handler:
        client = self.client(object_type)
        operation = operation_name(method)
        if operation not in client.meta.method_to_api_mapping:
            raise ConfigError("aws.unknown_operation", f"{object_type}.{method} ({operation})")
        call: Callable[..., Any] = getattr(client, operation)
        _LOGGER.debug("bound %s.%s to %s", object_type, method, operation)

        def handler(params: Mapping[str, Any]) -> Any:
            return _read_streams(call(**dict(params)))

        return handler


__all__ = ["AwsPort", "SERVICE_ALIASES", "operation_name", "service_name"]
