# Services package init
"""
Product API — Services Layer
==============================

Service Inventory:
    - ProductService: create / list / get / update / delete, one database
      operation each, with not-found and database error translation.

Services receive the request's database session and know nothing about
HTTP, so they can be unit-tested with a mocked session.
"""
