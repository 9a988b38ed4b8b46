"""
测试菜单树工具：森林组装、孤儿策略、成环校验
"""
from types import SimpleNamespace
from uuid import uuid4

import pytest

from app.utils.menu_tree import (
    ORPHAN_INCLUDE_ANCESTORS, ORPHAN_PROMOTE, ORPHAN_SUPPRESS,
    build_menu_forest, collect_descendants, would_create_cycle,
)


def make_menu(name, parent=None, sort=0):
    return SimpleNamespace(
        id=uuid4(),
        parent_id=parent.id if parent else None,
        name=name,
        path=f"/{name.lower()}",
        icon=None,
        type="menu",
        component=None,
        permission_code=None,
        sort=sort,
    )


def names(forest):
    return [(node.name, names(node.children)) for node in forest]


class TestBuildMenuForest:
    """森林组装"""

    def test_sibling_order_by_sort_then_name(self):
        """兄弟节点按 (sort, name) 升序"""
        root = make_menu("Root")
        b = make_menu("B", root, sort=1)
        a = make_menu("A", root, sort=1)
        c = make_menu("C", root, sort=0)

        forest = build_menu_forest([b, root, a, c])

        assert names(forest) == [("Root", [("C", []), ("A", []), ("B", [])])]

    def test_input_order_does_not_matter(self):
        """输入顺序不同，结果一致"""
        root = make_menu("Root")
        child = make_menu("Child", root)
        grandchild = make_menu("Grand", child)

        first = build_menu_forest([grandchild, child, root])
        second = build_menu_forest([root, child, grandchild])

        assert first == second
        assert names(first) == [("Root", [("Child", [("Grand", [])])])]

    def test_include_ancestors_completes_chain(self):
        """父节点未授权但可用时补齐祖先"""
        users = make_menu("Users")
        reports = make_menu("Reports", users)
        candidates = {m.id: m for m in (users, reports)}

        forest = build_menu_forest([reports], ORPHAN_INCLUDE_ANCESTORS, candidates=candidates)

        assert names(forest) == [("Users", [("Reports", [])])]

    def test_include_ancestors_suppresses_broken_chain(self):
        """祖先不可用（停用/隐藏）时整条链隐藏"""
        users = make_menu("Users")
        reports = make_menu("Reports", users)

        forest = build_menu_forest([reports], ORPHAN_INCLUDE_ANCESTORS, candidates={reports.id: reports})

        assert forest == []

    def test_promote_orphan_to_root(self):
        users = make_menu("Users")
        reports = make_menu("Reports", users)

        forest = build_menu_forest([reports], ORPHAN_PROMOTE)

        assert names(forest) == [("Reports", [])]

    def test_suppress_orphan(self):
        users = make_menu("Users")
        reports = make_menu("Reports", users)
        detail = make_menu("Detail", reports)

        forest = build_menu_forest([reports, detail], ORPHAN_SUPPRESS)

        assert forest == []

    def test_unknown_policy(self):
        with pytest.raises(ValueError):
            build_menu_forest([], "whatever")

    def test_existing_cycle_terminates(self):
        """已有数据成环时不会无限递归"""
        a = make_menu("A")
        b = make_menu("B", a)
        a.parent_id = b.id

        assert build_menu_forest([a, b], ORPHAN_PROMOTE) == []


class TestCycleCheck:
    """成环校验与后代收集"""

    def setup_method(self):
        self.root, self.child, self.grand = uuid4(), uuid4(), uuid4()
        self.parent_map = {self.root: None, self.child: self.root, self.grand: self.child}

    def test_self_parent(self):
        assert would_create_cycle(self.parent_map, self.root, self.root)

    def test_move_under_descendant(self):
        assert would_create_cycle(self.parent_map, self.root, self.grand)

    def test_valid_move(self):
        assert not would_create_cycle(self.parent_map, self.grand, self.root)
        assert not would_create_cycle(self.parent_map, self.child, None)

    def test_collect_descendants(self):
        assert collect_descendants(self.parent_map, self.root) == [self.child, self.grand]
        assert collect_descendants(self.parent_map, self.grand) == []


def test_models_registered():
    """导出的模型均继承Base，且全部注册到元数据"""
    from app.models import Base, validate_models

    validate_models()
    assert {"sys_user", "sys_role", "sys_menu", "sys_permission", "sys_user_role"} <= set(Base.metadata.tables)
