"""
Tests for Category and CategoryHierarchy.
"""

from uuid import uuid4

import pytest

from conftest import make_category, make_product
from domain.catalog.aggregates import Category
from domain.catalog.hierarchy import CategoryHierarchy
from domain.shared.events import CategoryMoved
from domain.shared.exceptions import (
    BusinessRuleViolationException,
    CircularReferenceException,
    InvalidOperationException,
    ValidationException,
)


@pytest.fixture
def hierarchy(tree):
    return CategoryHierarchy(tree.values())


class TestCategory:
    """Category aggregate rules"""

    def test_create_defaults(self):
        category = Category.create("  Fruit ", "fruit")

        assert category.name == "Fruit"
        assert category.is_root
        assert category.is_active
        assert category.sort_order == 0
        assert category.can_be_displayed

    def test_cannot_be_own_parent(self):
        category = make_category("Fruit", "fruit")

        with pytest.raises(BusinessRuleViolationException, match="own parent"):
            category.set_parent(category.id)

    def test_set_parent_records_move(self, tree):
        tree["C3"].set_parent(tree["R"].id)

        event = tree["C3"].domain_events[-1]
        assert isinstance(event, CategoryMoved)
        assert event.old_parent_id == tree["C1"].id
        assert event.new_parent_id == tree["R"].id

    def test_invalid_slug_fails(self):
        with pytest.raises(ValidationException):
            Category.create("Fruit", "Fruit & Veg")

    def test_negative_sort_order_fails(self):
        with pytest.raises(ValidationException):
            make_category("Fruit", "fruit").set_sort_order(-1)

    def test_deleted_category_rejects_mutation(self):
        category = make_category("Fruit", "fruit")
        category.delete()

        with pytest.raises(InvalidOperationException, match="Cannot modify deleted category"):
            category.update_basic_info("Veg")

        category.restore()
        category.update_basic_info("Veg", "")
        assert category.description is None

    def test_hierarchy_helpers_use_supplied_collection(self, tree):
        others = [c for key, c in tree.items() if key != "C3"]
        c3 = tree["C3"]

        assert c3.get_level(others) == 2
        assert [c.slug for c in c3.get_path(others)] == ["root", "child-one", "grandchild"]
        assert tree["R"].is_ancestor_of(c3, list(tree.values()))
        assert c3.is_descendant_of(tree["R"], list(tree.values()))
        assert tree["C1"].get_children(list(tree.values())) == [c3]

    def test_publication_checklist(self):
        assert make_category("Fruit", "fruit").validate_for_publication() == []


class TestTraversal:
    """Children, descendants, ancestors and paths"""

    def test_roots_and_children_sorted(self, tree, hierarchy):
        assert hierarchy.roots() == [tree["R"]]
        assert hierarchy.children(tree["R"].id) == [tree["C1"], tree["C2"]]

    def test_children_follow_sort_order(self, tree, hierarchy):
        tree["C1"].set_sort_order(5)

        assert CategoryHierarchy(tree.values()).children(tree["R"].id) == [tree["C2"], tree["C1"]]

    def test_descendants_pre_order_without_self(self, tree, hierarchy):
        descendants = hierarchy.descendants(tree["R"].id)

        assert descendants == [tree["C1"], tree["C3"], tree["C2"]]
        assert tree["R"] not in descendants

    @pytest.mark.parametrize("key", ["R", "C1", "C2", "C3"])
    def test_ancestor_descendant_agree(self, tree, hierarchy, key):
        category = tree[key]
        for ancestor in hierarchy.ancestors(category.id):
            assert category in hierarchy.descendants(ancestor.id)
            assert hierarchy.is_descendant_of(category.id, ancestor.id)
        assert category not in hierarchy.descendants(category.id)

    def test_path_and_level(self, tree, hierarchy):
        assert hierarchy.path(tree["C3"].id) == [tree["R"], tree["C1"], tree["C3"]]
        assert hierarchy.ancestors(tree["C3"].id) == [tree["R"], tree["C1"]]
        assert hierarchy.level(tree["R"].id) == 0
        assert hierarchy.level(tree["C3"].id) == 2

    def test_path_stops_at_missing_parent(self, tree):
        hierarchy = CategoryHierarchy([tree["C1"], tree["C3"]])

        assert hierarchy.path(tree["C3"].id) == [tree["C1"], tree["C3"]]

    def test_breadcrumb(self, tree, hierarchy):
        crumbs = hierarchy.breadcrumb(tree["C3"].id)

        assert [c.slug for c in crumbs] == ["root", "child-one", "grandchild"]
        assert crumbs[0].id == tree["R"].id

    def test_deleted_subtree_is_hidden(self, tree):
        tree["C1"].delete()
        hierarchy = CategoryHierarchy(tree.values())

        assert hierarchy.descendants(tree["R"].id) == [tree["C2"]]
        assert hierarchy.path(tree["C3"].id) == [tree["R"], tree["C1"], tree["C3"]]

    def test_deep_chain(self):
        chain = [make_category("Level 0", "level-0")]
        for depth in range(1, 3000):
            chain.append(make_category(f"Level {depth}", f"level-{depth}", chain[-1]))
        hierarchy = CategoryHierarchy(chain)
        root, leaf = chain[0], chain[-1]

        assert hierarchy.descendants(root.id) == chain[1:]
        assert hierarchy.level(leaf.id) == 2999
        assert hierarchy.is_ancestor_of(root.id, leaf.id)
        assert not hierarchy.validate_move(root.id, leaf.id)
        with pytest.raises(CircularReferenceException):
            hierarchy.ensure_can_move(root.id, leaf.id)

        node = hierarchy.build_tree()[0]
        depth = 0
        while node.children:
            assert len(node.children) == 1
            node = node.children[0]
            depth += 1
        assert node.category is leaf
        assert node.level == depth == 2999

    def test_parent_loop_is_cut(self):
        a = make_category("A", "a")
        b = make_category("B", "b", a)
        a.parent_id = b.id
        hierarchy = CategoryHierarchy([a, b])

        assert hierarchy.descendants(a.id) == [b]
        assert len(hierarchy.path(a.id)) == 2
        assert any("cycle" in problem for problem in hierarchy.validate())


class TestBuildTree:
    """Browsing tree construction"""

    def test_levels(self, tree, hierarchy):
        forest = hierarchy.build_tree()

        assert len(forest) == 1
        root = forest[0]
        assert root.category == tree["R"]
        assert root.level == 0
        assert [(n.category, n.level) for n in root.children] == [(tree["C1"], 1), (tree["C2"], 1)]
        c1 = root.children[0]
        assert [(n.category, n.level) for n in c1.children] == [(tree["C3"], 2)]
        assert not root.children[1].has_children

    def test_subtree_levels_restart_at_zero(self, tree, hierarchy):
        forest = hierarchy.build_tree(tree["C1"].id)

        assert forest[0].level == 0
        assert forest[0].children[0].level == 1

    def test_missing_or_deleted_root_gives_empty_forest(self, tree, hierarchy):
        assert hierarchy.build_tree(uuid4()) == []

        tree["C2"].delete()
        assert CategoryHierarchy(tree.values()).build_tree(tree["C2"].id) == []

    def test_product_counts_include_descendants(self, tree, hierarchy):
        rice = make_product(sku="RICE-001", slug="rice")
        rice.assign_to_categories([tree["C1"].id, tree["C3"].id])
        noodles = make_product(sku="NOODLE-001", slug="noodles")
        noodles.add_to_category(tree["C3"].id)

        counts = CategoryHierarchy.count_products_by_category([rice, noodles])
        root = hierarchy.build_tree(product_counts=counts)[0]

        # rice sits in C1 and C3, so the subtree totals count it twice
        assert root.product_count == 3
        assert root.children[0].product_count == 3
        assert root.children[0].children[0].product_count == 2
        assert root.children[1].product_count == 0
        assert hierarchy.product_count(tree["C1"].id, counts) == 1

    def test_deleted_products_are_not_counted(self, tree):
        product = make_product()
        product.add_to_category(tree["C1"].id)
        product.delete()

        assert CategoryHierarchy.count_products_by_category([product]) == {}

    def test_to_dict(self, tree, hierarchy):
        data = hierarchy.build_tree()[0].to_dict()

        assert data["slug"] == "root"
        assert data["has_children"]
        assert data["product_count"] is None
        assert [child["slug"] for child in data["children"]] == ["child-one", "child-two"]


class TestMoveAndDelete:
    """Reparenting and delete guards"""

    def test_move_under_own_descendant_fails(self, tree, hierarchy):
        assert not hierarchy.validate_move(tree["R"].id, tree["C3"].id)

        with pytest.raises(CircularReferenceException, match="own descendant"):
            hierarchy.ensure_can_move(tree["R"].id, tree["C3"].id)

    def test_move_under_self_fails(self, tree, hierarchy):
        assert not hierarchy.validate_move(tree["C1"].id, tree["C1"].id)
        with pytest.raises(BusinessRuleViolationException):
            hierarchy.ensure_can_move(tree["C1"].id, tree["C1"].id)

    def test_valid_moves(self, tree, hierarchy):
        assert hierarchy.validate_move(tree["C3"].id, tree["C2"].id)
        assert hierarchy.validate_move(tree["C1"].id, None)
        hierarchy.ensure_can_move(tree["C3"].id, tree["R"].id)

    def test_delete_with_children_fails_until_children_are_gone(self, tree, hierarchy):
        with pytest.raises(BusinessRuleViolationException) as exc_info:
            hierarchy.ensure_can_delete(tree["C1"].id)
        assert exc_info.value.details["rule"] == "CATEGORY_HAS_CHILDREN"

        tree["C3"].delete()
        CategoryHierarchy(tree.values()).ensure_can_delete(tree["C1"].id)

    def test_validate_reports_missing_parent(self, tree):
        problems = CategoryHierarchy([tree["C3"]]).validate()

        assert problems == [f"Category {tree['C3'].id} has missing parent {tree['C1'].id}"]

    def test_validate_clean_tree(self, hierarchy):
        assert hierarchy.validate() == []
