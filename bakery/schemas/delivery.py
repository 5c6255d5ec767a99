"""
Pydantic schemas for delivery options
"""
from datetime import date

from pydantic import BaseModel


class DeliveryOptionResponse(BaseModel):
    value: str
    label: str
    delivery_date: date
    date_string: str
    deadline: str
    days_left: int
    available: bool
