# Routes package init
"""
markerbridge: Routes Package
===============================

Route Inventory (registered in this order):
    - ingest.py:    POST /qr/{rest}     (parse marker JSON, forward to sink)
    - assets.py:    GET  /{path}        (*.js from script root, else UI root)
    - fallback.py:  POST /{path}        → 404 "Not Found"
                    other verbs         → 405 "Method Not Allowed"

Order matters: Starlette takes the first route whose path AND method match,
so /qr/ must be registered before the catch-all POST.
"""
