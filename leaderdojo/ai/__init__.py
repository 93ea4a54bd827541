"""AI layer: provider adapters, typed gateway, prompt templates."""

from flask import current_app

from leaderdojo.ai.gateway import AIGateway, build_gateway


def get_gateway() -> AIGateway:
    """The gateway built by create_app for the current application."""
    return current_app.extensions["ai_gateway"]


__all__ = ["AIGateway", "build_gateway", "get_gateway"]
