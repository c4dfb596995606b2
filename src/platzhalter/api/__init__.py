"""Platzhalter — FastAPI REST API layer.

Modules
-------
main
    FastAPI application factory, route handlers, and the ``main()`` CLI
    entry point.
handler
    Cache-or-render protocol shared by the routes.
"""
