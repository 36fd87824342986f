"""Service layer: derivation requests returning ServiceResult.

Services may import from domain, infrastructure, and plugins.
They must never import from commands or output.
"""
