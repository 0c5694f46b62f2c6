# Middleware package init
"""
Venue Directory Backend: Middleware Package
==============================================

Middleware Chain:
    Request → [Request ID] → [Access Log] → [CORS] → Route Handler

    - Request ID first, so every log line and error body can carry it
    - Access log records method, path, status and duration per request
    - CORS answers preflight requests from the frontend origin(s)
"""
