# Routes package init
"""
Venue Directory Backend: API Routes Package
==============================================

Route Inventory (registration order in main.create_app):
    - health.py:       GET    /health
    - auth.py:         POST   /api/auth/login
    - restaurants.py:  GET    /api/restaurants
                       POST   /api/restaurants
                       GET    /api/restaurants/{venue_id}
                       PUT    /api/restaurants/{venue_id}
                       DELETE /api/restaurants/{venue_id}
    - places.py:       GET    /api/places/search?query=
                       GET    /api/places/details/{place_id}

`venue_id` is declared as int, so /api/restaurants/<anything non-numeric>
never matches the item routes. Places lookups live under their own prefix.

Routes stay thin: read the request, call a service, set the status code.
"""
