"""Domain layer (record mapping and entity definitions).

Domain modules do not depend on infrastructure. Record sources are injected into
repositories rather than imported here.
"""
