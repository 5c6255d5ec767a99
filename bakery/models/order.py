"""
SQLAlchemy Order model
"""
import uuid

from sqlalchemy import Column, String, Float, DateTime, Date, Boolean, Text, JSON
from sqlalchemy.sql import func
from bakery.database import Base


class Order(Base):
    """Order database model"""
    
    __tablename__ = "orders"
    
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), nullable=False, index=True)
    customer_name = Column(String(100), nullable=False)
    customer_phone = Column(String(20), nullable=False)
    customer_address = Column(String(255), nullable=True)
    customer_city = Column(String(100), nullable=True)
    delivery_date = Column(Date, nullable=False, index=True)
    # Either {name: quantity} (legacy) or [{productId, name, quantity, unitPrice}]
    items = Column(JSON, nullable=False)
    total_price = Column(Float, nullable=False)
    status = Column(String(50), nullable=False, default='pending', index=True)
    archived = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<Order(id={self.id}, user_id={self.user_id}, status='{self.status}', archived={self.archived})>"
