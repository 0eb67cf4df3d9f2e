"""
Snippety — Middleware Package
===============================

Middleware Chain (order matters):
    Request → [Request ID] → [Logging] → [GZip] → Route Handler

    1. Request ID first: every later log line can carry it
    2. Logging: measures status and duration of everything below it
"""
