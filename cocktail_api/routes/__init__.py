# Routes package init
"""
Cocktail Catalog Backend: API Routes Package
==============================================

Route Inventory:
    - auth.py:       POST /auth/signin, GET /auth/validate
    - users.py:      /user (register, list, get, update, delete)
    - spirits.py:    /spirit (list, admin create)
    - cocktails.py:  /cocktail (list, by spirit, get, create, update, delete)
    - comments.py:   /comment (list, by cocktail, post, admin delete)
    - images.py:     GET /images/{file_path}
    - health.py:     GET /health
    - uploads.py:    multipart/JSON body helpers shared by the above

Routes stay thin: read the request, call a service, shape the response.
Protected routes depend on require_user / require_admin (dependencies.py).
"""
