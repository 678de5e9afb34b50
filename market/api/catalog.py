# market/api/catalog.py
# Public catalog reads.
from fastapi import APIRouter, Depends

from market.api.deps import get_catalog_service
from market.schemas.catalog import CategoryOut, ProductOut
from market.schemas.common import ok
from market.services.catalog import CatalogService

router = APIRouter()


def _products(products) -> list[ProductOut]:
    return [ProductOut.model_validate(p) for p in products]


@router.get("/products")
def list_products(catalog: CatalogService = Depends(get_catalog_service)):
    return ok("Products retrieved successfully", _products(catalog.list_products()))


@router.get("/categories")
def list_categories(catalog: CatalogService = Depends(get_catalog_service)):
    data = [CategoryOut.model_validate(c) for c in catalog.list_categories()]
    return ok("Categories retrieved successfully", data)


@router.get("/product/{name}")
def search_products(name: str, catalog: CatalogService = Depends(get_catalog_service)):
    """Products whose name contains `name`, ignoring case."""
    return ok("Products retrieved successfully", _products(catalog.search_products(name)))


@router.get("/productBy/cat/{category}")
def products_by_category(category: str, catalog: CatalogService = Depends(get_catalog_service)):
    return ok("Products retrieved successfully", _products(catalog.products_by_category(category)))
