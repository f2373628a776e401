"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from riskmap.controller import ViewController


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_controller(request: Request) -> ViewController:
    """Provide the application's view controller"""
    return request.app.state.controller
