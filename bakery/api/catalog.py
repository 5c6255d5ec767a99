"""
Storefront catalog and delivery endpoints
"""
from fastapi import APIRouter, Depends
from typing import List

from bakery.api.deps import general_rate_limit, get_catalog_service
from bakery.schemas.catalog import CartQuoteRequest, CartQuoteResponse, CatalogResponse
from bakery.schemas.delivery import DeliveryOptionResponse
from bakery.services.catalog_service import CatalogService
from bakery.utils.delivery import get_delivery_options

router = APIRouter(tags=["storefront"])


@router.get("/catalog", response_model=CatalogResponse, summary="Get active catalog")
def get_catalog(service: CatalogService = Depends(get_catalog_service)):
    """Active catalog revision with its categories and breads"""
    return service.get_active_catalog()


@router.post(
    "/catalog/quote",
    response_model=CartQuoteResponse,
    summary="Price a cart",
    dependencies=[Depends(general_rate_limit)]
)
def quote_cart(
    quote: CartQuoteRequest,
    service: CatalogService = Depends(get_catalog_service)
):
    """
    Price a cart of catalog item ids against the active catalog
    
    - **cart**: Mapping of item id to quantity
    """
    return service.quote_cart(quote.cart)


@router.get("/delivery-options", response_model=List[DeliveryOptionResponse], summary="Get delivery options")
def delivery_options():
    """Next Tuesday and Friday deliveries with their order deadlines"""
    return [
        DeliveryOptionResponse(**option._asdict(), available=option.available)
        for option in get_delivery_options()
    ]
