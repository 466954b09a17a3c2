"""Business logic services.

This module contains service-layer functions that implement business logic.
Services are called by route handlers and orchestrate store and generator calls.
"""

from dreampost.services.generator import PostcardGenerator, build_generator
from dreampost.services.postcards import create_from_recording

__all__ = [
    "PostcardGenerator",
    "build_generator",
    "create_from_recording",
]
