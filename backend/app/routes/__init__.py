# Routes package init
"""
Product API — API Routes Package
==================================

Route Inventory:
    - products.py: GET/POST   /api/products
                   GET/PUT/DELETE /api/products/{id}
    - health.py:   GET /health (service health check)

Routes are thin: they extract request data, call ProductService, and let the
global exception handlers in main.py format any error.
"""
