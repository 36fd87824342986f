"""Domain layer: declarations, classification, synthesis, equations.

This layer depends only on stdlib.
It must never import from services, infrastructure, commands, or config.
"""
