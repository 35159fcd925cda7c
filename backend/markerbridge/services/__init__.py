# Services package init
"""
markerbridge: Services Layer
===============================

What:  Request-independent logic sitting between routes (HTTP) and the
       outside world (filesystem, host process).

Service Inventory:
    - StaticFileService: path resolution, index.html fallback, content types
    - IngestService: body accumulation, JSON parsing, mapping construction
    - EmitSink (abstract): delivery contract for the host process
    - StdoutSink / LoggingSink / WebhookSink: concrete sinks
"""
