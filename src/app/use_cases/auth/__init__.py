"""
Authentication Use Cases

Credential verification in front of session creation.
"""

from .login_use_case import LoginUseCase

__all__ = [
    "LoginUseCase",
]
