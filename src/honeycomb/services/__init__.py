"""Service layer: policy operations returning ServiceResult.

Services may import from domain, codec and infrastructure layers.
They must never import from commands or output.
"""
