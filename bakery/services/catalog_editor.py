"""
Admin catalog editor

An editor holds a baseline catalog fetched when editing starts and a working
copy that every operation rewrites. ``has_changes`` compares the two on every
read. Sessions are kept per admin in ``EditorSessionRegistry``.

Modes::

    viewing --start_editing--> editing
    editing --save ok--------> viewing (baseline = saved catalog)
    editing --discard--------> viewing (baseline unchanged)
"""
import copy
from typing import Callable, Dict, List, Optional

from bakery.schemas.catalog import BreadCategory, CatalogResult, EditorOperation, EditorState

VIEWING = "viewing"
EDITING = "editing"

NEW_CATEGORY_TITLE = "קטגוריה חדשה"
NEW_ITEM_NAME = "מוצר חדש"

NOT_EDITING = "יש להיכנס למצב עריכה תחילה"
BAD_INDEX = "פריט או קטגוריה לא קיימים"
LAST_CATEGORY = "לא ניתן למחוק את הקטגוריה האחרונה"
LAST_ITEM = "לא ניתן למחוק את המוצר האחרון בקטגוריה"
MISSING_FIELD = "חסרים נתונים לפעולה"


class EditorError(Exception):
    """An edit that is not allowed in the current state"""
    pass


def max_item_id(catalog: List[dict]) -> int:
    """Highest item id across every category"""
    return max((bread["id"] for category in catalog for bread in category["breads"]), default=0)


class CatalogEditor:
    """Working copy of the catalog for one admin"""
    
    def __init__(self, baseline: List[BreadCategory], revision: int):
        self.baseline = [category.model_dump() for category in baseline]
        self.revision = revision
        self.catalog = copy.deepcopy(self.baseline)
        self.mode = VIEWING
    
    @property
    def has_changes(self) -> bool:
        return self.catalog != self.baseline
    
    def state(self) -> EditorState:
        categories = self.catalog if self.mode == EDITING else self.baseline
        return EditorState(
            mode=self.mode,
            revision=self.revision,
            categories=[BreadCategory.model_validate(c) for c in categories],
            has_changes=self.has_changes
        )
    
    def start_editing(self) -> None:
        if self.mode == VIEWING:
            self.catalog = copy.deepcopy(self.baseline)
            self.mode = EDITING
    
    def apply(self, operation: EditorOperation) -> None:
        """
        Apply one operation to the working copy
        
        Raises:
            EditorError: If the operation is blocked or malformed
        """
        if self.mode != EDITING:
            raise EditorError(NOT_EDITING)
        handler = getattr(self, f"_op_{operation.op}")
        handler(operation)
    
    def save(self, save_catalog: Callable[[List[BreadCategory]], CatalogResult]) -> CatalogResult:
        """Submit the whole working copy; on success it becomes the baseline"""
        if self.mode != EDITING:
            raise EditorError(NOT_EDITING)
        categories = [BreadCategory.model_validate(c) for c in self.catalog]
        result = save_catalog(categories)
        if result.success:
            self.baseline = copy.deepcopy(self.catalog)
            self.revision = result.revision
            self.mode = VIEWING
        return result
    
    def discard(self, confirmed: bool = False) -> bool:
        """
        Drop unsaved edits
        
        Returns:
            False when there are changes and the caller has not confirmed
        """
        if self.has_changes and not confirmed:
            return False
        self.catalog = copy.deepcopy(self.baseline)
        self.mode = VIEWING
        return True
    
    # Operations
    
    def _category(self, operation: EditorOperation) -> dict:
        index = operation.category_index
        if index is None or index >= len(self.catalog):
            raise EditorError(BAD_INDEX)
        return self.catalog[index]
    
    def _item_index(self, category: dict, operation: EditorOperation) -> int:
        index = operation.item_index
        if index is None or index >= len(category["breads"]):
            raise EditorError(BAD_INDEX)
        return index
    
    def _op_add_category(self, operation: EditorOperation) -> None:
        self.catalog.insert(0, {
            "title": NEW_CATEGORY_TITLE,
            "price": 0,
            "breads": [{"id": max_item_id(self.catalog) + 1, "name": NEW_ITEM_NAME}],
        })
    
    def _op_remove_category(self, operation: EditorOperation) -> None:
        self._category(operation)
        if len(self.catalog) <= 1:
            raise EditorError(LAST_CATEGORY)
        del self.catalog[operation.category_index]
    
    def _op_move_category(self, operation: EditorOperation) -> None:
        self._category(operation)
        _swap_adjacent(self.catalog, operation.category_index, operation.direction)
    
    def _op_update_category(self, operation: EditorOperation) -> None:
        category = self._category(operation)
        if operation.title is None and operation.price is None:
            raise EditorError(MISSING_FIELD)
        if operation.title is not None:
            category["title"] = operation.title
        if operation.price is not None:
            category["price"] = operation.price
    
    def _op_add_item(self, operation: EditorOperation) -> None:
        category = self._category(operation)
        category["breads"].insert(0, {"id": max_item_id(self.catalog) + 1, "name": NEW_ITEM_NAME})
    
    def _op_remove_item(self, operation: EditorOperation) -> None:
        category = self._category(operation)
        index = self._item_index(category, operation)
        if len(category["breads"]) <= 1:
            raise EditorError(LAST_ITEM)
        del category["breads"][index]
    
    def _op_move_item(self, operation: EditorOperation) -> None:
        category = self._category(operation)
        _swap_adjacent(category["breads"], self._item_index(category, operation), operation.direction)
    
    def _op_rename_item(self, operation: EditorOperation) -> None:
        category = self._category(operation)
        index = self._item_index(category, operation)
        if operation.name is None:
            raise EditorError(MISSING_FIELD)
        category["breads"][index]["name"] = operation.name


def _swap_adjacent(entries: list, index: int, direction: Optional[str]) -> None:
    """Swap with the neighbour above or below; no-op at the edges"""
    if direction not in ("up", "down"):
        raise EditorError(MISSING_FIELD)
    other = index - 1 if direction == "up" else index + 1
    if 0 <= other < len(entries):
        entries[index], entries[other] = entries[other], entries[index]


class EditorSessionRegistry:
    """Editor sessions keyed by admin user id, held in process memory"""
    
    def __init__(self):
        self._sessions: Dict[str, CatalogEditor] = {}
    
    def get(self, user_id: str) -> Optional[CatalogEditor]:
        return self._sessions.get(user_id)
    
    def open(self, user_id: str, baseline: List[BreadCategory], revision: int) -> CatalogEditor:
        editor = CatalogEditor(baseline, revision)
        self._sessions[user_id] = editor
        return editor
    
    def close(self, user_id: str) -> None:
        self._sessions.pop(user_id, None)
