"""
菜单树工具（纯函数，不访问数据库）
backend/app/utils/menu_tree.py
核心功能：
1. build_menu_forest：扁平菜单 → 有序森林，按孤儿策略处理父节点未授权的菜单
2. would_create_cycle / collect_descendants：基于 {id: parent_id} 的成环校验与后代收集
"""
import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Optional, Set
from uuid import UUID

from app.schemas.sys_menu import MenuNode

logger = logging.getLogger(__name__)

__all__ = [
    "ORPHAN_INCLUDE_ANCESTORS",
    "ORPHAN_PROMOTE",
    "ORPHAN_SUPPRESS",
    "build_menu_forest",
    "would_create_cycle",
    "collect_descendants",
]

ORPHAN_INCLUDE_ANCESTORS = "include_ancestors"
ORPHAN_PROMOTE = "promote"
ORPHAN_SUPPRESS = "suppress"


def _sort_key(menu):
    return (menu.sort or 0, menu.name or "", menu.id)


def _complete_ancestors(
    nodes: Dict[UUID, object],
    candidates: Mapping[UUID, object],
) -> Set[UUID]:
    """
    为父节点缺失的菜单补齐祖先链，返回补链失败需要丢弃的菜单ID
    祖先必须出现在candidates中（启用且可见），否则整条链作废
    """
    suppressed: Set[UUID] = set()
    for menu_id in sorted(list(nodes.keys())):
        menu = nodes[menu_id]
        if menu.parent_id is None or menu.parent_id in nodes:
            continue

        chain = []
        visited = {menu_id}
        parent_id = menu.parent_id
        complete = False
        while True:
            if parent_id is None or parent_id in nodes:
                complete = True
                break
            if parent_id in visited or parent_id not in candidates:
                break
            visited.add(parent_id)
            ancestor = candidates[parent_id]
            chain.append(ancestor)
            parent_id = ancestor.parent_id

        if complete:
            for ancestor in chain:
                nodes[ancestor.id] = ancestor
        else:
            suppressed.add(menu_id)
            logger.debug(f"菜单祖先链不完整，已隐藏 | 菜单ID：{menu_id}")
    return suppressed


def build_menu_forest(
    menus: Iterable,
    orphan_policy: str = ORPHAN_INCLUDE_ANCESTORS,
    candidates: Optional[Mapping[UUID, object]] = None,
) -> List[MenuNode]:
    """
    将扁平菜单组装为森林
    :param menus: 具备 id/parent_id/name/sort 等属性的菜单对象
    :param orphan_policy: include_ancestors / promote / suppress
    :param candidates: 可用于补齐祖先链的菜单 {id: menu}，仅 include_ancestors 使用
    :return: 根节点列表，兄弟节点按 (sort, name, id) 升序
    """
    nodes: Dict[UUID, object] = {}
    for menu in menus:
        nodes[menu.id] = menu

    roots: Set[UUID] = set()
    if orphan_policy == ORPHAN_INCLUDE_ANCESTORS:
        for menu_id in _complete_ancestors(nodes, candidates or {}):
            nodes.pop(menu_id, None)
    elif orphan_policy == ORPHAN_PROMOTE:
        roots = {mid for mid, m in nodes.items() if m.parent_id is not None and m.parent_id not in nodes}
    elif orphan_policy != ORPHAN_SUPPRESS:
        raise ValueError(f"未知的孤儿菜单策略：{orphan_policy}")

    children_map: Dict[Optional[UUID], List] = defaultdict(list)
    for menu_id, menu in nodes.items():
        if menu.parent_id is None or menu_id in roots:
            children_map[None].append(menu)
        else:
            children_map[menu.parent_id].append(menu)

    # 从根向下展开，父节点缺失的子树自然不可达
    def build(parent_key: Optional[UUID], path: Set[UUID]) -> List[MenuNode]:
        result = []
        for menu in sorted(children_map.get(parent_key, []), key=_sort_key):
            if menu.id in path:
                continue
            result.append(MenuNode(
                id=menu.id,
                parent_id=menu.parent_id,
                name=menu.name,
                path=menu.path,
                icon=menu.icon,
                type=menu.type,
                component=menu.component,
                permission_code=menu.permission_code,
                sort=menu.sort or 0,
                children=build(menu.id, path | {menu.id}),
            ))
        return result

    return build(None, set())


def would_create_cycle(
    parent_map: Mapping[UUID, Optional[UUID]],
    menu_id: UUID,
    new_parent_id: Optional[UUID],
) -> bool:
    """把 menu_id 挂到 new_parent_id 下是否会成环（含指向自身）"""
    visited: Set[UUID] = set()
    current = new_parent_id
    while current is not None:
        if current == menu_id:
            return True
        if current in visited:
            # 已有数据成环，同样拒绝
            return True
        visited.add(current)
        current = parent_map.get(current)
    return False


def collect_descendants(parent_map: Mapping[UUID, Optional[UUID]], menu_id: UUID) -> List[UUID]:
    """广度优先收集全部后代ID（不含自身）"""
    children: Dict[UUID, List[UUID]] = defaultdict(list)
    for child_id, parent_id in parent_map.items():
        if parent_id is not None:
            children[parent_id].append(child_id)

    result: List[UUID] = []
    seen = {menu_id}
    queue = [menu_id]
    while queue:
        current = queue.pop(0)
        for child_id in children.get(current, []):
            if child_id not in seen:
                seen.add(child_id)
                result.append(child_id)
                queue.append(child_id)
    return result
