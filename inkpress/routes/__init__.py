# Routes package init
"""
Inkpress Backend - API Routes Package
======================================

Route Inventory:
    - auth.py:    POST /register, POST /login, POST /logout, GET /profile
    - posts.py:   POST /post, GET /post, GET /post/{id}, PUT /post
    - health.py:  GET  /health

Routes are thin: they extract data from the request (JSON body, form fields,
the `file` part, the `token` cookie), call a service, and shape the response.
"""
