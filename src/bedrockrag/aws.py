"""
Bedrock runtime client construction.

One ``bedrock-runtime`` client is shared by the embedder and the LLM.
Retries and timeouts are left to botocore's standard retry mode.
"""

import logging

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError

from bedrockrag.exceptions import ConfigError

logger = logging.getLogger(__name__)


def create_bedrock_client(region: str, max_attempts: int = 3):
    """
    Create a Bedrock runtime client for the given region.

    Credentials come from the default AWS provider chain (environment,
    shared config, instance role).

    Args:
        region: AWS region name
        max_attempts: Total attempts botocore makes per call

    Returns:
        boto3 ``bedrock-runtime`` client

    Raises:
        ConfigError: If the region or client configuration is invalid
    """
    config = Config(
        region_name=region,
        retries={"max_attempts": max_attempts, "mode": "standard"},
    )

    try:
        client = boto3.client("bedrock-runtime", region_name=region, config=config)
    except BotoCoreError as e:
        raise ConfigError(f"Could not create Bedrock client for region {region!r}: {e}") from e

    logger.debug(f"Bedrock runtime client ready ({region})")
    return client
