"""Domain layer — module references, variables, and wrapper rendering.

This layer depends only on stdlib and the HCL parser.
It must never import from services, infrastructure, commands, or config.
"""
