"""Application services layer (repository wiring, view models).

Services coordinate repositories for the pages that render records. They avoid
UI concerns.
"""
