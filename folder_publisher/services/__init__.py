# Shared services
from .logger_service import LoggerService

__all__ = ['LoggerService']
