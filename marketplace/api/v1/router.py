"""API v1 router aggregation."""

from fastapi import APIRouter

from marketplace.api.v1.endpoints import accounts, catalog, enterprises, links, products, reference, saves

api_router = APIRouter()

api_router.include_router(accounts.router, prefix="/accounts", tags=["Accounts"])
api_router.include_router(saves.router, prefix="/accounts", tags=["Saves"])
api_router.include_router(enterprises.router, prefix="/enterprises", tags=["Enterprises"])
api_router.include_router(links.router, prefix="/external-links", tags=["Enterprises"])
api_router.include_router(products.router, prefix="/products", tags=["Products"])
api_router.include_router(catalog.router, prefix="/catalog", tags=["Catalog"])
api_router.include_router(reference.router, tags=["Reference data"])
