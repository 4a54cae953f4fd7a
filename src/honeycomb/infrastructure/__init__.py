"""Infrastructure layer: profile file I/O.

This layer depends on stdlib only.
It must never import from domain, services, commands, or output.
"""
