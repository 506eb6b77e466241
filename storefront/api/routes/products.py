"""
Product routes

The catalog page is computed in-process: the full product list is fetched
once, facets are derived from it, and the query pipeline filters, sorts and
paginates it.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query

from storefront.core.config import settings
from storefront.core.exceptions import GatewayError
from storefront.schemas.product import (
    CatalogPageResponse,
    FacetsResponse,
    PriceBounds,
    ProductResponse,
    SuggestionsResponse,
)
from storefront.services.catalog import (
    Facets,
    SUGGESTION_PRODUCT_LIMIT,
    SortKey,
    active_filter_count,
    build_suggestions,
    derive_facets,
    run_catalog_query,
    state_from_params,
    to_query_params,
)
from storefront.services.gateway import DataGateway, get_gateway

router = APIRouter()

SUGGESTION_SEARCH_FIELDS = ["name", "description", "brand"]


async def load_catalog(gateway: DataGateway) -> List[ProductResponse]:
    try:
        rows = await gateway.select("products", order_by="id")
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to load products"
        )
    return [ProductResponse.model_validate(row) for row in rows]


def facets_response(facets: Facets) -> FacetsResponse:
    low, high = facets.price_bounds
    return FacetsResponse(
        categories=list(facets.categories),
        brands=list(facets.brands),
        price_range=PriceBounds(min=low, max=high),
    )


@router.get("", response_model=CatalogPageResponse)
async def list_products(
    search: Optional[str] = None,
    category: List[str] = Query([]),
    brand: List[str] = Query([]),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    min_rating: float = Query(0, ge=0, le=5),
    in_stock: bool = False,
    sort: SortKey = SortKey.NAME,
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.CATALOG_PAGE_SIZE, ge=1, le=100),
    gateway: DataGateway = Depends(get_gateway)
):
    """List products with search, filters, sorting and pagination"""
    products = await load_catalog(gateway)
    facets = derive_facets(products)

    try:
        state = state_from_params(
            {
                "search": search,
                "category": category,
                "brand": brand,
                "min_price": min_price,
                "max_price": max_price,
                "min_rating": min_rating,
                "in_stock": in_stock,
                "sort": sort.value,
                "page": page,
            },
            facets,
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    result = run_catalog_query(products, state.to_query(page_size))

    return CatalogPageResponse(
        items=result.items,
        total_count=result.total_count,
        total_pages=result.total_pages,
        page=result.page,
        page_size=result.page_size,
        facets=facets_response(facets),
        active_filter_count=active_filter_count(state.filters, facets),
        query_params=to_query_params(state),
    )


@router.get("/facets", response_model=FacetsResponse)
async def get_facets(gateway: DataGateway = Depends(get_gateway)):
    """Categories, brands and price bounds for the filter panel"""
    return facets_response(derive_facets(await load_catalog(gateway)))


@router.get("/suggestions", response_model=SuggestionsResponse)
async def get_suggestions(
    q: str = Query("", max_length=100),
    gateway: DataGateway = Depends(get_gateway)
):
    """Autocomplete: matching products, categories and brands"""
    term = q.strip()
    if not term:
        return SuggestionsResponse(products=[], categories=[], brands=[])

    try:
        rows = await gateway.select(
            "products",
            search=(term, SUGGESTION_SEARCH_FIELDS),
            limit=SUGGESTION_PRODUCT_LIMIT,
        )
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to load suggestions"
        )

    return build_suggestions([ProductResponse.model_validate(r) for r in rows], term)


@router.get("/featured", response_model=List[ProductResponse])
async def get_featured_products(gateway: DataGateway = Depends(get_gateway)):
    """Products for the home page"""
    try:
        return await gateway.select("products", order_by="id", limit=settings.FEATURED_PRODUCTS_LIMIT)
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to load products"
        )


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: int, gateway: DataGateway = Depends(get_gateway)):
    """Get single product"""
    try:
        product = await gateway.select_one("products", filters={"id": product_id})
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to load product"
        )

    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found"
        )

    return product
