"""
Kernel layer: persisted models and the identity core.

No HTTP concerns live here; the api package adapts these to FastAPI.
"""
