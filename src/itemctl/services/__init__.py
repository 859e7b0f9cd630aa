"""Service layer — item facade and batch processor.

Services may import from domain and infrastructure layers.
They must never import from commands, output, or api.
"""
