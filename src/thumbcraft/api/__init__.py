"""Thumbcraft — FastAPI REST API layer.

This package contains the FastAPI application, Pydantic request/response
models, and the template persistence helpers.

Modules
-------
main
    Application factory, route handlers, and the ``main()`` CLI entry point.
models
    Pydantic models for API request and response validation.
template_store
    File-backed saved-template storage.
"""
