"""
Pydantic schemas for orders

Stored orders carry one of two item shapes: the legacy ``{name: quantity}``
mapping and the list of line-item records. Both are parsed into a tagged
union at the read boundary and normalized to ``List[LineItem]`` before they
leave this module.
"""
from datetime import date, datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    computed_field,
    field_validator,
)

from bakery.constants import ORDER_STATUSES
from bakery.schemas.common import ActionResult


class LineItem(BaseModel):
    """Normalized order line"""
    product_id: Optional[int] = Field(
        None, validation_alias=AliasChoices("product_id", "productId", "breadId")
    )
    name: str
    quantity: int
    unit_price: Optional[float] = Field(
        None, validation_alias=AliasChoices("unit_price", "unitPrice", "price")
    )

    model_config = ConfigDict(populate_by_name=True)


class MappingItems(BaseModel):
    kind: Literal["mapping"] = "mapping"
    items: Dict[str, int]


class LineItemList(BaseModel):
    kind: Literal["lineItems"] = "lineItems"
    items: List[LineItem]


StoredItems = Annotated[Union[MappingItems, LineItemList], Field(discriminator="kind")]

_stored_items_adapter = TypeAdapter(StoredItems)


def parse_stored_items(raw: Any) -> Union[MappingItems, LineItemList]:
    """Tag a raw ``orders.items`` JSON value with its shape"""
    if isinstance(raw, dict):
        return _stored_items_adapter.validate_python({"kind": "mapping", "items": raw})
    if isinstance(raw, list):
        return _stored_items_adapter.validate_python({"kind": "lineItems", "items": raw})
    raise ValueError(f"Unsupported order items shape: {type(raw).__name__}")


def normalize_items(stored: Union[MappingItems, LineItemList]) -> List[LineItem]:
    if isinstance(stored, MappingItems):
        return [LineItem(name=name, quantity=quantity) for name, quantity in stored.items.items()]
    return list(stored.items)


def serialize_line_items(items: List[LineItem]) -> List[Dict[str, Any]]:
    """Storage form for new orders"""
    return [
        {
            "productId": item.product_id,
            "name": item.name,
            "quantity": item.quantity,
            "unitPrice": item.unit_price,
        }
        for item in items
    ]


class OrderItemIn(BaseModel):
    """Cart line as submitted by the storefront"""
    product_id: Optional[int] = Field(None, description="Catalog item id")
    name: str = Field("", description="Display name")
    quantity: int = Field(..., description="Quantity ordered")
    price: float = Field(..., description="Unit price")


class OrderCreate(BaseModel):
    """Schema for submitting an order"""
    customer_name: str = ""
    customer_phone: str = ""
    customer_address: Optional[str] = None
    customer_city: Optional[str] = None
    delivery_date: Optional[date] = None
    items: List[OrderItemIn] = []
    total_price: float = Field(..., description="Client computed total")
    notes: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    """Schema for updating order status"""
    status: Literal['pending', 'confirmed', 'preparing', 'ready', 'delivered', 'cancelled'] = Field(
        ...,
        description="Order status"
    )


class OrderArchiveUpdate(BaseModel):
    archived: bool


class OrderResponse(BaseModel):
    """Schema for order response"""
    id: str
    user_id: str
    customer_name: str
    customer_phone: str
    customer_address: Optional[str]
    customer_city: Optional[str]
    delivery_date: date
    items: List[LineItem]
    total_price: float
    status: str
    archived: bool
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime
    
    model_config = ConfigDict(from_attributes=True)

    @field_validator("items", mode="before")
    @classmethod
    def normalize_stored_items(cls, value):
        if isinstance(value, dict) or (
            isinstance(value, list) and all(isinstance(v, dict) for v in value)
        ):
            return normalize_items(parse_stored_items(value))
        return value

    @computed_field
    @property
    def status_label(self) -> str:
        return ORDER_STATUSES.get(self.status, self.status)


class OrderListResponse(BaseModel):
    """Schema for list of orders response"""
    orders: list[OrderResponse]
    total: int


class OrderStats(BaseModel):
    """Dashboard figures over non-archived orders"""
    total: int
    pending: int
    confirmed: int
    delivered: int
    archived: int
    total_income: float
    next_delivery_date: Optional[date]
    next_delivery: int
    next_delivery_pending: int
    next_delivery_cancelled: int
    next_delivery_income: float
    next_delivery_pending_income: float


class OrderResult(ActionResult):
    """Result of a customer order action"""
    order_id: Optional[str] = None
    field: Optional[str] = None
    redirect_to: Optional[str] = None
    reset_time: Optional[datetime] = None


class AdminOrderResult(ActionResult):
    """Result of an admin order mutation; carries the persisted row"""
    order: Optional[OrderResponse] = None


class AdminOrderListResult(ActionResult):
    orders: list[OrderResponse] = []
    total: int = 0


class OrderStatsResult(ActionResult):
    stats: Optional[OrderStats] = None
