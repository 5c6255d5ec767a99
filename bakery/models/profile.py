"""
SQLAlchemy Profile model
"""
from sqlalchemy import Column, String, DateTime, CheckConstraint
from sqlalchemy.sql import func
from bakery.database import Base


class Profile(Base):
    """User profile, one row per authenticated identity"""
    
    __tablename__ = "profiles"
    
    id = Column(String(36), primary_key=True)  # auth provider user id
    full_name = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True, index=True)
    phone = Column(String(20), nullable=True)
    address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    role = Column(String(20), nullable=False, default='customer')
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    
    __table_args__ = (
        CheckConstraint("role IN ('admin', 'customer')", name='check_role_valid'),
    )
    
    def __repr__(self):
        return f"<Profile(id={self.id}, role='{self.role}')>"
