"""
Schemas package for API request/response shapes.
"""
from .common import (
    Document,
    HealthCheckResponse,
    InsertOneResponse,
    DeleteOneResponse,
)

__all__ = [
    "Document",
    "HealthCheckResponse",
    "InsertOneResponse",
    "DeleteOneResponse",
]
