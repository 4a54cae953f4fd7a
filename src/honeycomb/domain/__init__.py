"""Domain layer: policy catalogue, locator, mutator and the apply entry point.

This layer depends only on stdlib, pydantic and the codec.
It must never import from services, infrastructure, commands, or config.
It raises HoneycombError subclasses and never logs.
"""
