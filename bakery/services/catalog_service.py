"""
Catalog Service - Business Logic Layer
"""
import logging
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bakery.constants import DEFAULT_CATALOG
from bakery.errors import ErrorCode, report_error, get_user_error_message
from bakery.publishers.event_publisher import EventPublisher
from bakery.repositories.catalog_repository import CatalogRepository
from bakery.schemas.catalog import (
    BreadCategory,
    CartQuoteResponse,
    CatalogResponse,
    CatalogResult,
    CatalogRevisionResponse,
    CatalogRevisionsResult,
    EditorOperation,
    EditorResult
)
from bakery.schemas.order import LineItem
from bakery.services.access import admin_denial
from bakery.services.auth_client import AuthUser
from bakery.services.catalog_editor import EditorError, EditorSessionRegistry

logger = logging.getLogger(__name__)

EMPTY_CATALOG = "הקטלוג חייב להכיל לפחות קטגוריה אחת"
INVALID_CATEGORY = "לכל קטגוריה נדרשים שם, מחיר תקין ולפחות מוצר אחד"
INVALID_ITEM = "לכל מוצר נדרש שם"
DUPLICATE_ITEM_ID = "מזהה מוצר מופיע יותר מפעם אחת בקטלוג"
SAVE_FAILED = "שגיאה בשמירת הקטלוג"
HISTORY_FAILED = "שגיאה בטעינת היסטוריית קטלוגים"
NO_EDITOR = "לא נפתחה עריכת קטלוג"
DISCARD_CONFIRM = "יש שינויים שלא נשמרו. לבטל אותם?"
UNEXPECTED_ERROR = "שגיאה לא צפויה"


def validate_catalog(categories: List[BreadCategory]) -> Optional[str]:
    """Return the first problem with a catalog tree, or None"""
    if not categories:
        return EMPTY_CATALOG
    
    seen_ids = set()
    for category in categories:
        if not category.title.strip() or category.price < 0 or not category.breads:
            return INVALID_CATEGORY
        for bread in category.breads:
            if not bread.name.strip():
                return INVALID_ITEM
            if bread.id in seen_ids:
                return DUPLICATE_ITEM_ID
            seen_ids.add(bread.id)
    return None


class CatalogService:
    """Service layer for the product catalog"""
    
    def __init__(
        self,
        db: Session,
        editor_registry: Optional[EditorSessionRegistry] = None,
        event_publisher: Optional[EventPublisher] = None,
    ):
        self.db = db
        self.repository = CatalogRepository(db)
        self.editor_registry = editor_registry or EditorSessionRegistry()
        self.event_publisher = event_publisher or EventPublisher()
    
    def get_active_catalog(self) -> CatalogResponse:
        """Active revision; the built-in catalog at revision 0 if none is stored"""
        try:
            catalog = self.repository.get_active()
        except SQLAlchemyError as e:
            self.db.rollback()
            report_error(e, "get_active_catalog")
            catalog = None
        
        if catalog is None:
            return CatalogResponse(revision=0, categories=DEFAULT_CATALOG)
        return CatalogResponse(revision=catalog.revision or 0, categories=catalog.catalog_data)
    
    def update_catalog(self, user: Optional[AuthUser], categories: List[BreadCategory]) -> CatalogResult:
        """
        Save a full catalog tree as a new active revision (admin only)
        
        Args:
            user: Authenticated caller
            categories: Complete catalog
        
        Returns:
            CatalogResult with the new revision number
        """
        denied = admin_denial(self.db, user)
        if denied:
            return CatalogResult.fail(*denied)
        return self._save(user, categories)
    
    def _save(self, user: AuthUser, categories: List[BreadCategory]) -> CatalogResult:
        problem = validate_catalog(categories)
        if problem:
            return CatalogResult.fail(ErrorCode.VALIDATION_FAILED, problem)
        
        try:
            # Check-then-write, concurrent saves may pick the same revision
            next_revision = self.repository.get_max_revision() + 1
            catalog = self.repository.replace_active(
                next_revision,
                [category.model_dump() for category in categories]
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            report_error(e, "update_catalog", user.id, {"categories": len(categories)})
            return CatalogResult.fail(ErrorCode.BACKEND_UNAVAILABLE, get_user_error_message(e, SAVE_FAILED))
        except Exception as e:
            report_error(e, "update_catalog", user.id, {"categories": len(categories)})
            return CatalogResult.fail(ErrorCode.UNEXPECTED, get_user_error_message(e, UNEXPECTED_ERROR))
        
        logger.info("Catalog revision %d saved by %s", catalog.revision, user.id)
        try:
            self.event_publisher.publish_catalog_updated({'revision': catalog.revision})
        except Exception as e:
            logger.warning("Failed to publish CatalogUpdated event: %s", e)
        
        return CatalogResult(success=True, revision=catalog.revision)
    
    def list_revisions(self, user: Optional[AuthUser]) -> CatalogRevisionsResult:
        """All catalog revisions, newest first (admin only)"""
        denied = admin_denial(self.db, user)
        if denied:
            return CatalogRevisionsResult.fail(*denied)
        
        try:
            revisions = self.repository.get_all()
        except SQLAlchemyError as e:
            self.db.rollback()
            report_error(e, "list_revisions", user.id)
            return CatalogRevisionsResult.fail(
                ErrorCode.BACKEND_UNAVAILABLE, get_user_error_message(e, HISTORY_FAILED)
            )
        return CatalogRevisionsResult(
            success=True,
            revisions=[CatalogRevisionResponse.model_validate(r) for r in revisions]
        )
    
    def quote_cart(self, cart: Dict[int, int]) -> CartQuoteResponse:
        """
        Price a storefront cart against the active catalog
        
        Unknown item ids and non-positive quantities are dropped.
        """
        catalog = self.get_active_catalog()
        index = {
            bread.id: (category, bread)
            for category in catalog.categories
            for bread in category.breads
        }
        
        items = []
        for bread_id, quantity in cart.items():
            if quantity <= 0 or bread_id not in index:
                continue
            category, bread = index[bread_id]
            items.append(LineItem(
                product_id=bread.id,
                name=f"{category.title} – {bread.name}",
                quantity=quantity,
                unit_price=category.price
            ))
        
        return CartQuoteResponse(
            revision=catalog.revision,
            items=items,
            total_price=sum(item.quantity * item.unit_price for item in items),
            total_items=sum(item.quantity for item in items)
        )
    
    # Editor sessions
    
    def enter_editor(self, user: Optional[AuthUser]) -> EditorResult:
        """Start (or resume) editing against the active catalog"""
        denied = admin_denial(self.db, user)
        if denied:
            return EditorResult.fail(*denied)
        
        editor = self.editor_registry.get(user.id)
        if editor is None or editor.mode != "editing":
            active = self.get_active_catalog()
            editor = self.editor_registry.open(user.id, active.categories, active.revision)
        editor.start_editing()
        return EditorResult(success=True, state=editor.state())
    
    def editor_state(self, user: Optional[AuthUser]) -> EditorResult:
        denied = admin_denial(self.db, user)
        if denied:
            return EditorResult.fail(*denied)
        
        editor = self.editor_registry.get(user.id)
        if editor is None:
            return EditorResult.fail(ErrorCode.NOT_FOUND, NO_EDITOR)
        return EditorResult(success=True, state=editor.state())
    
    def apply_editor_operation(self, user: Optional[AuthUser], operation: EditorOperation) -> EditorResult:
        denied = admin_denial(self.db, user)
        if denied:
            return EditorResult.fail(*denied)
        
        editor = self.editor_registry.get(user.id)
        if editor is None:
            return EditorResult.fail(ErrorCode.NOT_FOUND, NO_EDITOR)
        try:
            editor.apply(operation)
        except EditorError as e:
            return EditorResult.fail(ErrorCode.INVALID_TRANSITION, str(e), state=editor.state())
        return EditorResult(success=True, state=editor.state())
    
    def save_editor(self, user: Optional[AuthUser]) -> EditorResult:
        denied = admin_denial(self.db, user)
        if denied:
            return EditorResult.fail(*denied)
        
        editor = self.editor_registry.get(user.id)
        if editor is None:
            return EditorResult.fail(ErrorCode.NOT_FOUND, NO_EDITOR)
        try:
            result = editor.save(lambda categories: self._save(user, categories))
        except EditorError as e:
            return EditorResult.fail(ErrorCode.INVALID_TRANSITION, str(e), state=editor.state())
        if not result.success:
            return EditorResult.fail(result.error_code, result.error, state=editor.state())
        return EditorResult(success=True, state=editor.state())
    
    def discard_editor(self, user: Optional[AuthUser], confirmed: bool = False) -> EditorResult:
        denied = admin_denial(self.db, user)
        if denied:
            return EditorResult.fail(*denied)
        
        editor = self.editor_registry.get(user.id)
        if editor is None:
            return EditorResult.fail(ErrorCode.NOT_FOUND, NO_EDITOR)
        if not editor.discard(confirmed):
            return EditorResult(
                success=False,
                error=DISCARD_CONFIRM,
                error_code=ErrorCode.INVALID_TRANSITION,
                needs_confirmation=True,
                state=editor.state()
            )
        return EditorResult(success=True, state=editor.state())
