"""
Pydantic schemas for the product catalog and its editor
"""
from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from bakery.schemas.common import ActionResult
from bakery.schemas.order import LineItem


class BreadItem(BaseModel):
    id: int
    name: str


class BreadCategory(BaseModel):
    """Category with one price for all of its breads"""
    title: str
    price: float
    breads: List[BreadItem]


class CatalogResponse(BaseModel):
    revision: int
    categories: List[BreadCategory]


class CatalogUpdate(BaseModel):
    categories: List[BreadCategory]


class CatalogRevisionResponse(BaseModel):
    id: int
    revision: int
    catalog_data: List[BreadCategory]
    is_active: bool
    created_at: datetime
    updated_at: datetime
    
    model_config = ConfigDict(from_attributes=True)


class CatalogResult(ActionResult):
    revision: Optional[int] = None


class CatalogRevisionsResult(ActionResult):
    revisions: List[CatalogRevisionResponse] = []


class CartQuoteRequest(BaseModel):
    """Storefront cart: catalog item id -> quantity"""
    cart: Dict[int, int]


class CartQuoteResponse(BaseModel):
    revision: int
    items: List[LineItem]
    total_price: float
    total_items: int


EditorOp = Literal[
    "add_category",
    "remove_category",
    "move_category",
    "update_category",
    "add_item",
    "remove_item",
    "move_item",
    "rename_item",
]


class EditorOperation(BaseModel):
    """One edit applied to an editor session"""
    op: EditorOp
    category_index: Optional[int] = Field(None, ge=0)
    item_index: Optional[int] = Field(None, ge=0)
    direction: Optional[Literal["up", "down"]] = None
    title: Optional[str] = None
    price: Optional[float] = None
    name: Optional[str] = None


class EditorState(BaseModel):
    mode: Literal["viewing", "editing"]
    revision: int
    categories: List[BreadCategory]
    has_changes: bool


class EditorResult(ActionResult):
    state: Optional[EditorState] = None
    needs_confirmation: bool = False
