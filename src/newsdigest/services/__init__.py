"""Request-level services."""

from newsdigest.services.gateway import DigestGateway, GatewayResult

__all__ = ["DigestGateway", "GatewayResult"]
