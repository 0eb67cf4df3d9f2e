"""
Snippety — Route Handlers
===========================

    - snippets: HTML pages (home, view, create)
    - health:   GET /health

Routers are plain APIRouter objects; create_app() includes them explicitly.
"""
