# storefront/api/__init__.py
from fastapi import FastAPI
from storefront.api.routers import admin, cart, favorites, health, orders, products, users

ROUTERS = (health, products, cart, favorites, orders, users, admin)


def include_routers(app: FastAPI) -> FastAPI:
    for module in ROUTERS:
        app.include_router(module.router)
    return app
