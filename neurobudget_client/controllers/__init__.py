"""
Controllers exposing application state to the UI layer.
"""
from .auth import AuthController, AuthListener, AuthState

__all__ = ["AuthController", "AuthListener", "AuthState"]
