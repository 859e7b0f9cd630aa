"""Domain layer — item model, payload validation, and domain errors.

Pure types with no infrastructure imports.
"""
