from __future__ import annotations

import asyncio
import logging
from functools import lru_cache
from typing import Any

from botocore.exceptions import BotoCoreError
from pydantic import ValidationError

from newsdigest.api.response import create_response
from newsdigest.core.config import get_settings
from newsdigest.core.exceptions import DigestError
from newsdigest.core.logging import configure_logging
from newsdigest.services.gateway import DigestGateway
from newsdigest.storage.cache import DigestCache, build_s3_client

LOGGER = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def build_gateway() -> DigestGateway:
    """Process-scoped gateway; the storage client is built once per container."""
    settings = get_settings()
    configure_logging(settings)
    cache = DigestCache(build_s3_client(settings))
    return DigestGateway(cache, settings=settings)


async def handle_request() -> dict[str, Any]:
    try:
        gateway = build_gateway()
    except (DigestError, BotoCoreError, ValidationError) as exc:
        LOGGER.error("Gateway setup failed: %s", exc)
        return create_response(500, {"error": str(exc)})

    result = await gateway.handle()
    return create_response(result.status_code, result.body)


def handler(event: Any = None, context: Any = None) -> dict[str, Any]:
    # the triggering event carries nothing we use
    return asyncio.run(handle_request())
