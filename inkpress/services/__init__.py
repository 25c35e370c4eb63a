# Services package init
"""
Inkpress Backend - Services Layer
==================================

Service Inventory:
    - UserStore:       users table access; username uniqueness via constraint
    - PostStore:       posts table access; title uniqueness, recent listing
    - PasswordHasher:  bcrypt hash/verify, fresh salt per hash
    - TokenService:    signed, time-bound session tokens (JWT)
    - UploadService:   cover image storage in the upload directory
    - AuthService:     register / login orchestration
    - PostService:     create / list / get / edit with ownership checks

Each module exposes a module-level singleton (e.g. `post_service`); all of
them are stateless per request and receive the AsyncSession as an argument.
"""
