"""
Snippety — Request Dependencies
=================================

The store and template cache are created by create_app() and attached to
`app.state`; handlers receive them through these FastAPI dependencies
instead of importing module-level singletons.
"""

from starlette.requests import Request

from snippety.services.snippet_store import SnippetStore
from snippety.templates import TemplateCache


def get_snippet_store(request: Request) -> SnippetStore:
    return request.app.state.snippets


def get_templates(request: Request) -> TemplateCache:
    return request.app.state.templates
