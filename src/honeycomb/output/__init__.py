"""Output layer: turns ServiceResult into text for humans or machines.

Output may import from services (for ServiceResult) only.
It must never import from commands, domain or codec.
"""
