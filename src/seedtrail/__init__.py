"""
seedtrail: record data changes during a session and replay them elsewhere.

Observes create/update/destroy events on tracked records, merges them into
one tag per logical entity, and emits ordered seed scripts that reproduce
the same logical state on a database whose surrogate ids differ.
"""

__version__ = "0.1.0"
