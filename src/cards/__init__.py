"""Card resolution engine.

The engine turns a catalog of card records into immutable lookup indices and resolves noisy user
queries against them (exact key lookups first, substring fallback for longer queries).
"""
