"""
API Dependencies
================
FastAPI dependency providers for the shared assistant services
"""

from fastapi import Request

from murphybot.services.assistant import Assistant


def get_assistant(request: Request) -> Assistant:
    """Assistant built during application startup"""
    return request.app.state.assistant
