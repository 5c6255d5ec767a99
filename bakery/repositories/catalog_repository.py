"""
Product Catalog Repository - Data Access Layer
"""
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import desc, func

from bakery.models.catalog import ProductCatalog


class CatalogRepository:
    """Repository for catalog revisions"""
    
    def __init__(self, db: Session):
        self.db = db
    
    def get_active(self) -> Optional[ProductCatalog]:
        """Get the active revision"""
        return self.db.query(ProductCatalog).filter(
            ProductCatalog.is_active.is_(True)
        ).order_by(desc(ProductCatalog.updated_at)).first()
    
    def get_all(self) -> List[ProductCatalog]:
        """Get every revision, newest first"""
        return self.db.query(ProductCatalog).order_by(
            desc(ProductCatalog.revision)
        ).all()
    
    def get_max_revision(self) -> int:
        """Highest revision number stored, 0 when there is none"""
        return self.db.query(func.max(ProductCatalog.revision)).scalar() or 0
    
    def count_active(self) -> int:
        return self.db.query(ProductCatalog).filter(
            ProductCatalog.is_active.is_(True)
        ).count()
    
    def replace_active(self, revision: int, catalog_data: list) -> ProductCatalog:
        """
        Deactivate all revisions and insert a new active one
        
        Both writes are committed together.
        """
        self.db.query(ProductCatalog).filter(
            ProductCatalog.is_active.is_(True)
        ).update({"is_active": False}, synchronize_session=False)
        
        catalog = ProductCatalog(
            revision=revision,
            catalog_data=catalog_data,
            is_active=True
        )
        self.db.add(catalog)
        self.db.commit()
        self.db.refresh(catalog)
        return catalog
