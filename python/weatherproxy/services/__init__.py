"""Service layer.

Upstream clients and the helpers they share. Route handlers call into
these; nothing here knows about FastAPI.

Submodules are imported directly (e.g. ``weatherproxy.services.redact``):
the pipeline stages depend on redact, and the weather client depends on
the pipeline.
"""
