# Routes package init
"""
CloudMemo Backend - API Routes Package
========================================

What:  HTTP route handlers that accept requests and return responses.
How:   Each route module handles one resource; main.py mounts all of them
       except health under settings.api_prefix (default /api).

Route Inventory:
    - auth.py:    POST   /api/login          (password → session token)
    - memos.py:   GET    /api/memos          (list, newest update first)
                  POST   /api/memos          (create)
                  GET    /api/memos/{id}     (read one)
                  PUT    /api/memos/{id}     (update)
                  DELETE /api/memos/{id}     (delete)
    - clip.py:    GET    /api/clip           (read clip slot)
                  POST   /api/clip           (overwrite clip slot)
    - health.py:  GET    /health             (service health check)

Routes stay thin: extract input, call a service, pick the status code.
"""
