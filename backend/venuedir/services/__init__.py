# Services package init
"""
Venue Directory Backend: Services Layer
==========================================

What:  Logic between routes (HTTP) and the database / places provider.
How:   Each service receives its session or HTTP client at construction;
       route dependencies build them per request.

Service Inventory:
    - VenueRepository:  CRUD on restaurants
    - CredentialStore:  user lookup, last_login, create-or-reset
    - AuthService:      email/password → signed token
    - PlacesClient:     Google Places text search / details
"""
