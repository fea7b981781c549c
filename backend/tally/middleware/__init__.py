"""
Tally Backend - Middleware Package
===================================

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [Session] → [CORS] → Route Handler

    1. Request ID: correlation id for logs and the X-Request-ID header
    2. Logging: method, path, status and duration, tagged with the request id
    3. Session: Starlette SessionMiddleware, decodes the signed cookie into
       request.session (registered in tally.main)
    4. CORS: FastAPI's CORSMiddleware (handles preflight)
"""
