from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any, cast

import boto3
from botocore.config import Config

DEFAULT_REGION = "us-east-1"


def create_client_config(
    *,
    connect_timeout: float = 1.0,
    read_timeout: float = 3.0,
    max_attempts: int | None = None,
) -> Config:
    """Build the botocore config for the DynamoDB client.

    Timeouts and retries are the client's business; ``max_attempts`` is only
    forwarded to botocore when given.
    """
    kwargs: dict[str, Any] = {"connect_timeout": connect_timeout, "read_timeout": read_timeout}
    if max_attempts is not None:
        kwargs["retries"] = {"max_attempts": max_attempts, "mode": "standard"}
    return Config(**kwargs)


def client_from_env(
    environ: Mapping[str, str] = os.environ,
    *,
    config: Config | None = None,
    session: Any | None = None,
) -> Any:
    endpoint = (environ.get("DYNAMODB_ENDPOINT") or "").strip() or None
    region = environ.get("AWS_REGION") or environ.get("AWS_DEFAULT_REGION") or DEFAULT_REGION

    kwargs: dict[str, Any] = {"region_name": region}
    if endpoint is not None:
        kwargs["endpoint_url"] = endpoint
        # DynamoDB Local accepts any credentials.
        kwargs["aws_access_key_id"] = environ.get("AWS_ACCESS_KEY_ID", "dummy")
        kwargs["aws_secret_access_key"] = environ.get("AWS_SECRET_ACCESS_KEY", "dummy")
    if config is not None:
        kwargs["config"] = config

    sess = session or boto3.session.Session()
    return cast(Any, sess).client("dynamodb", **kwargs)
