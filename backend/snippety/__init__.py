"""
Snippety — Application Package
================================

A small server-rendered app for sharing text snippets that expire.

    ┌─────────────────────────────────────┐
    │     Routes (HTML pages, health)     │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │  SnippetStore  │  TemplateCache     │  ← data access │ rendering
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy engine
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
