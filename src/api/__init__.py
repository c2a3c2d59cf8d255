"""API layer - Concourse API communication."""

from .client import ConcourseApi, ProductionConcourseClient, MockConcourseClient
from .http import build_session

__all__ = [
    'ConcourseApi',
    'ProductionConcourseClient',
    'MockConcourseClient',
    'build_session',
]
