"""AWS client factory functions with connection pooling."""

import boto3
from functools import lru_cache
from typing import Any


@lru_cache(maxsize=1)
def get_bedrock_client() -> Any:
    """Get a cached Bedrock Runtime client instance."""
    return boto3.client("bedrock-runtime")
