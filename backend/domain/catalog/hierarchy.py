"""
Catalog Domain - Category hierarchy.

Categories only hold a parent reference. Every relationship beyond that is
computed here over a snapshot of the whole collection, indexed by id.
"""

from __future__ import annotations
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterable, List, Mapping, Optional, Set
from uuid import UUID
import logging

from domain.shared.exceptions import (
    BusinessRuleViolationException,
    CircularReferenceException,
)

if TYPE_CHECKING:
    from .aggregates import Category, Product


logger = logging.getLogger(__name__)


@dataclass
class CategoryTreeNode:
    """One category in a browsing tree, with its subtree already expanded."""

    category: "Category"
    children: List[CategoryTreeNode] = field(default_factory=list)
    level: int = 0
    product_count: Optional[int] = None

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    def to_dict(self) -> dict:
        return {
            "id": str(self.category.id),
            "name": self.category.name,
            "slug": self.category.slug,
            "level": self.level,
            "has_children": self.has_children,
            "product_count": self.product_count,
            "children": [child.to_dict() for child in self.children],
        }


@dataclass(frozen=True)
class Breadcrumb:
    id: UUID
    name: str
    slug: str


class CategoryHierarchy:
    """
    Arena of categories keyed by id.

    Deleted categories stay in the arena so paths through them still
    resolve, but they and their subtrees are never returned as children
    or descendants.
    """

    def __init__(self, categories: Iterable["Category"]):
        self._by_id: Dict[UUID, "Category"] = {}
        for category in categories:
            self._by_id[category.id] = category

        self._children: Dict[Optional[UUID], List["Category"]] = defaultdict(list)
        for category in self._by_id.values():
            self._children[category.parent_id].append(category)

    def __contains__(self, category_id: object) -> bool:
        return category_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)

    def get(self, category_id: Optional[UUID]) -> Optional["Category"]:
        if category_id is None:
            return None
        return self._by_id.get(category_id)

    # =========================================================================
    # TRAVERSAL
    # =========================================================================

    def roots(self) -> List["Category"]:
        """Live categories without a parent, by sort order."""
        return self._live_sorted(self._children.get(None, []))

    def children(self, category_id: UUID) -> List["Category"]:
        """Live direct children, by sort order."""
        return self._live_sorted(self._children.get(category_id, []))

    def descendants(self, category_id: UUID) -> List["Category"]:
        """
        All live descendants in depth-first pre-order.

        Never includes the category itself. A parent loop in corrupted data
        is cut at the first repeated id.
        """
        result: List["Category"] = []
        visited: Set[UUID] = {category_id}
        stack = list(reversed(self.children(category_id)))

        while stack:
            child = stack.pop()
            if child.id in visited:
                logger.warning(f"Category cycle detected at {child.id}; skipping subtree")
                continue
            visited.add(child.id)
            result.append(child)
            stack.extend(reversed(self.children(child.id)))

        return result

    def path(self, category_id: UUID) -> List["Category"]:
        """Root-to-self chain. Stops quietly at a missing parent."""
        chain: List["Category"] = []
        seen: Set[UUID] = set()
        current = self._by_id.get(category_id)

        while current is not None:
            if current.id in seen:
                logger.warning(f"Category cycle detected while walking up from {category_id}")
                break
            seen.add(current.id)
            chain.append(current)
            if current.parent_id is None:
                break
            parent = self._by_id.get(current.parent_id)
            if parent is None:
                logger.debug(f"Parent {current.parent_id} of category {current.id} not in snapshot")
            current = parent

        chain.reverse()
        return chain

    def ancestors(self, category_id: UUID) -> List["Category"]:
        """Root-to-parent chain, excluding the category itself."""
        return self.path(category_id)[:-1]

    def level(self, category_id: UUID) -> int:
        """Distance from the root; 0 for a root category."""
        return max(len(self.path(category_id)) - 1, 0)

    def breadcrumb(self, category_id: UUID) -> List[Breadcrumb]:
        return [Breadcrumb(c.id, c.name, c.slug) for c in self.path(category_id)]

    def is_ancestor_of(self, ancestor_id: UUID, descendant_id: UUID) -> bool:
        return any(c.id == descendant_id for c in self.descendants(ancestor_id))

    def is_descendant_of(self, descendant_id: UUID, ancestor_id: UUID) -> bool:
        return self.is_ancestor_of(ancestor_id, descendant_id)

    # =========================================================================
    # TREE
    # =========================================================================

    def build_tree(
        self,
        root_id: Optional[UUID] = None,
        product_counts: Optional[Mapping[UUID, int]] = None,
        include_descendants: bool = True,
    ) -> List[CategoryTreeNode]:
        """
        Build a forest for browsing.

        Starts from every root category, or from root_id alone. Levels count
        from the starting nodes. With product_counts (direct membership per
        category id), each node gets a product_count; include_descendants
        adds every descendant's direct count as well, so a product filed
        under two nested categories is counted once for each.
        """
        if root_id is None:
            starts = self.roots()
        else:
            root = self._by_id.get(root_id)
            if root is None or root.is_deleted:
                return []
            starts = [root]

        visited: Set[UUID] = set()
        forest: List[CategoryTreeNode] = []
        # (category, level, parent node or None for a top-level node)
        stack = [(category, 0, None) for category in reversed(starts)]

        while stack:
            category, level, parent = stack.pop()
            if category.id in visited:
                continue
            visited.add(category.id)
            node = CategoryTreeNode(category=category, level=level)
            if product_counts is not None:
                node.product_count = self.product_count(
                    category.id, product_counts, include_descendants
                )
            if parent is None:
                forest.append(node)
            else:
                parent.children.append(node)
            for child in reversed(self.children(category.id)):
                if child.id not in visited:
                    stack.append((child, level + 1, node))

        return forest

    def product_count(
        self,
        category_id: UUID,
        product_counts: Mapping[UUID, int],
        include_descendants: bool = False,
    ) -> int:
        count = product_counts.get(category_id, 0)
        if include_descendants:
            count += sum(product_counts.get(d.id, 0) for d in self.descendants(category_id))
        return count

    @staticmethod
    def count_products_by_category(products: Iterable["Product"]) -> Dict[UUID, int]:
        """Direct membership of live products per category id."""
        counts: Dict[UUID, int] = defaultdict(int)
        for product in products:
            if product.is_deleted:
                continue
            for category_id in product.category_ids:
                counts[category_id] += 1
        return dict(counts)

    # =========================================================================
    # VALIDATION
    # =========================================================================

    def validate_move(self, category_id: UUID, new_parent_id: Optional[UUID]) -> bool:
        """True when attaching category_id under new_parent_id keeps the graph acyclic."""
        if new_parent_id is None:
            return True
        if new_parent_id == category_id:
            return False
        return not self.is_ancestor_of(category_id, new_parent_id)

    def ensure_can_move(self, category_id: UUID, new_parent_id: Optional[UUID]) -> None:
        if new_parent_id is None:
            return
        if new_parent_id == category_id:
            raise BusinessRuleViolationException(
                "SELF_PARENT", "Category cannot be its own parent"
            )
        if self.is_ancestor_of(category_id, new_parent_id):
            raise CircularReferenceException([category_id, new_parent_id])

    def ensure_can_delete(self, category_id: UUID) -> None:
        if self.children(category_id):
            raise BusinessRuleViolationException(
                "CATEGORY_HAS_CHILDREN",
                "Cannot delete category that has subcategories. "
                "Please delete or move subcategories first.",
            )

    def validate(self) -> List[str]:
        """Report dangling parent references and parent loops."""
        problems: List[str] = []
        for category in self._by_id.values():
            if category.parent_id is not None and category.parent_id not in self._by_id:
                problems.append(
                    f"Category {category.id} has missing parent {category.parent_id}"
                )

        reported: Set[UUID] = set()
        for category in self._by_id.values():
            seen: List[UUID] = []
            current = category
            while current is not None and current.id not in seen:
                seen.append(current.id)
                current = self._by_id.get(current.parent_id) if current.parent_id else None
            if current is not None and current.id not in reported:
                loop = seen[seen.index(current.id):]
                reported.update(loop)
                problems.append(
                    "Category cycle: " + " -> ".join(str(item) for item in loop)
                )
        return problems

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _live_sorted(categories: List["Category"]) -> List["Category"]:
        return sorted(
            (c for c in categories if not c.is_deleted),
            key=lambda c: c.sort_order,
        )
