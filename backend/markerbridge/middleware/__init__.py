# Middleware package init
"""
markerbridge: Middleware Package
===================================

Middleware Chain:
    Request → [Logging] → Route Handler

The bridge has one middleware: a request logger that writes "METHOD URL"
before the route runs and the status and duration after it returns.
"""
