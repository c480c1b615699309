"""
FastAPI application for the FAQ chatbot backend.

This package provides REST API endpoints for:
- Domain-scoped chatbot FAQ search
- Chatbot category menus
- FAQ administration
- Health checks
"""
