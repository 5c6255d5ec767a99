"""
SQLAlchemy ProductCatalog model
"""
from sqlalchemy import Column, Integer, Boolean, DateTime, JSON
from sqlalchemy.sql import func
from bakery.database import Base


class ProductCatalog(Base):
    """Immutable catalog revision; exactly one row is active"""
    
    __tablename__ = "product_catalog"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    revision = Column(Integer, nullable=False, index=True)
    catalog_data = Column(JSON, nullable=False)
    is_active = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<ProductCatalog(revision={self.revision}, is_active={self.is_active})>"
