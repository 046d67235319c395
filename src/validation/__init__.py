"""Request validation package."""

from src.validation.validator import RequestValidationError, RequestValidator

__all__ = ["RequestValidationError", "RequestValidator"]
