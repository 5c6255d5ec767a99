"""
Order Repository - Data Access Layer
"""
from datetime import date, datetime, timezone
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import desc

from bakery.models.order import Order


class OrderRepository:
    """Repository for Order CRUD operations"""
    
    def __init__(self, db: Session):
        self.db = db
    
    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        status: Optional[str] = None,
        delivery_date: Optional[date] = None,
        archived: Optional[bool] = False,
    ) -> List[Order]:
        """Get orders with optional filters; archived=None returns both"""
        query = self.db.query(Order)
        if archived is not None:
            query = query.filter(Order.archived == archived)
        if status:
            query = query.filter(Order.status == status)
        if delivery_date:
            query = query.filter(Order.delivery_date == delivery_date)
        return query.order_by(
            desc(Order.created_at)
        ).offset(skip).limit(limit).all()
    
    def get_by_id(self, order_id: str) -> Optional[Order]:
        """Get order by ID"""
        return self.db.query(Order).filter(Order.id == order_id).first()
    
    def get_by_user(self, user_id: str) -> List[Order]:
        """Get orders owned by a user, newest first"""
        return self.db.query(Order).filter(
            Order.user_id == user_id
        ).order_by(desc(Order.created_at)).all()
    
    def has_pending(self, user_id: str) -> bool:
        """Whether the user already has an order awaiting confirmation"""
        return self.db.query(Order.id).filter(
            Order.user_id == user_id,
            Order.status == "pending"
        ).first() is not None
    
    def create(self, order_data: dict) -> Order:
        """
        Create new order
        
        Args:
            order_data: Dictionary with order fields
        
        Returns:
            Created order
        """
        order = Order(**order_data)
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        return order
    
    def cancel_owned(self, order_id: str, user_id: str) -> int:
        """
        Cancel an order, matching on owner as well as id
        
        Returns:
            Number of rows updated
        """
        updated = self.db.query(Order).filter(
            Order.id == order_id,
            Order.user_id == user_id
        ).update(
            {"status": "cancelled", "updated_at": datetime.now(timezone.utc)},
            synchronize_session="fetch"
        )
        self.db.commit()
        return updated
    
    def update_status(self, order_id: str, new_status: str) -> Optional[Order]:
        """Update order status"""
        order = self.get_by_id(order_id)
        if not order:
            return None
        
        order.status = new_status
        order.updated_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(order)
        return order
    
    def set_archived(self, order_id: str, archived: bool) -> Optional[Order]:
        """Toggle the archive flag, independent of status"""
        order = self.get_by_id(order_id)
        if not order:
            return None
        
        order.archived = archived
        order.updated_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(order)
        return order
    
    def count(self, archived: Optional[bool] = None) -> int:
        """Get total count of orders"""
        query = self.db.query(Order)
        if archived is not None:
            query = query.filter(Order.archived == archived)
        return query.count()
