"""Serverless entry point and response envelope."""

from newsdigest.api.response import create_response

__all__ = ["create_response"]
