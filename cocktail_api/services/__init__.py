# Services package init
"""
Cocktail Catalog Backend: Services Layer
==========================================

What:  Business logic between routes (HTTP) and the database.
How:   Services are plain classes built once in create_app() and handed to
       routes through dependencies.py; the db session is passed per call.

Service Inventory:
    - CredentialCodec:  salted password digests
    - TokenService:     session token issue/verify
    - ImageService:     upload intake and derivative transcoding
    - CocktailService:  cocktail orchestration (spirit, name, images, write)
    - UserService:      sign-in and account CRUD
    - SpiritService:    spirit listing and creation
    - CommentService:   comment listing, creation, deletion
"""
