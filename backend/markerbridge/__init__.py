"""
markerbridge: Local HTTP Bridge for Marker Tracking
======================================================

What: Serves the tracker UI and its scripts over GET, and forwards marker
      positions POSTed by the browser to a host process (the "sink").
Who:  Used by `python -m markerbridge`, uvicorn (factory mode) and pytest.

Layout:

    ┌─────────────────────────────────────┐
    │     Routes (assets, ingest, 405)    │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │  Services (static files, ingest)    │  ← path resolution, JSON parsing
    ├─────────────────────────────────────┤
    │     Sinks (stdout, log, webhook)    │  ← outbound delivery to the host
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
