"""
Tests for deep clone and wrap-as-group.

Covers:
- clone_deep id regeneration, naming, root-only offset, independence
- wrap_as_group group construction and child normalization
- wrap no-ops (missing target, target already a group)
- Id uniqueness after clone/wrap edits
"""
import math

import pytest

from models.layer import GroupLayer, ImageLayer, TextLayer
from models.transform import Vec2, Size
from services.layer_operations import (
    clone_deep, collect_ids, find_by_id, insert_after, iter_layers, wrap_as_group,
)
from utils.id_generator import generate_layer_id
from conftest import make_leaf


# ══════════════════════════════════════════════════════════════════════════
# Deep clone
# ══════════════════════════════════════════════════════════════════════════

class TestCloneDeep:
    """Tests for clone_deep."""

    def test_leaf_gets_new_id_name_and_offset(self, ids):
        leaf = make_leaf('A', TextLayer, name='Title', text='hi', position=Vec2(1, 2))
        clone = clone_deep(leaf, id_factory=ids)
        assert clone.id == 'new-1'
        assert clone.name == 'Title copy'
        assert clone.position == Vec2(11, 12)
        assert isinstance(clone, TextLayer)
        assert clone.text == 'hi'

    def test_group_subtree_counts_and_disjoint_ids(self, nested_tree, ids):
        g1 = nested_tree[1]
        clone = clone_deep(g1, id_factory=ids)
        source_ids = collect_ids([g1])
        clone_ids = collect_ids([clone])
        assert len(clone_ids) == len(source_ids) == 5
        assert len(set(clone_ids)) == 5
        assert set(clone_ids).isdisjoint(source_ids)

    def test_only_root_renamed_and_offset(self, nested_tree, ids):
        g1 = nested_tree[1]
        clone = clone_deep(g1, id_factory=ids)
        assert clone.name == 'Group 1 copy'
        assert clone.position == g1.position.offset(10, 10)
        nested_clone = clone.children[1]
        assert nested_clone.name == 'Group 2'
        assert nested_clone.position == Vec2(20, 20)
        assert [c.name for c in clone.children] == ['B', 'Group 2', 'C']

    def test_descendants_keep_their_fields(self, nested_tree, ids):
        clone = clone_deep(nested_tree[1], id_factory=ids)
        originals = list(iter_layers([nested_tree[1]]))[1:]
        copies = list(iter_layers([clone]))[1:]
        for original, copied in zip(originals, copies):
            assert type(copied) is type(original)
            assert copied.position == original.position
            assert copied.size == original.size

    def test_clone_does_not_share_meta(self, ids):
        inner = make_leaf('inner', meta={'tags': ['a']})
        group = GroupLayer(id='g', meta={'note': {'k': 1}}, children=(inner,))
        clone = clone_deep(group, id_factory=ids)

        clone.meta['note']['k'] = 2
        clone.children[0].meta['tags'].append('b')

        assert group.meta == {'note': {'k': 1}}
        assert inner.meta == {'tags': ['a']}

    def test_clone_leaves_source_untouched(self, nested_tree, ids):
        before = collect_ids(nested_tree)
        clone_deep(nested_tree[1], id_factory=ids)
        assert collect_ids(nested_tree) == before
        assert nested_tree[1].name == 'Group 1'

    def test_default_factory_mints_uuids(self, nested_tree):
        clone = clone_deep(nested_tree[1])
        assert len(set(collect_ids([clone]))) == 5
        assert not set(collect_ids([clone])) & set(collect_ids(nested_tree))

    def test_paste_clone_keeps_tree_unique(self, nested_tree):
        clone = clone_deep(find_by_id(nested_tree, 'g1'))
        _, tree = insert_after(nested_tree, 'g1', clone)
        all_ids = collect_ids(tree)
        assert len(all_ids) == len(set(all_ids)) == 12


# ══════════════════════════════════════════════════════════════════════════
# Wrap as group
# ══════════════════════════════════════════════════════════════════════════

class TestWrapAsGroup:
    """Tests for wrap_as_group."""

    def test_group_takes_target_placement(self, rotated_leaf, ids):
        tree, group_id = wrap_as_group((rotated_leaf,), 'R', id_factory=ids)
        assert group_id == 'new-1'
        group = tree[0]
        assert isinstance(group, GroupLayer)
        assert group.id == group_id
        assert group.name == rotated_leaf.name
        assert group.position == Vec2(50, 50)
        assert group.size == Size(100, 100)
        assert group.rotation == 30.0
        assert group.rotation_x == 10.0
        assert group.rotation_y == -5.0
        assert group.anchor_point == Vec2(0.2, 0.8)
        assert group.opacity == 0.6
        assert group.geometry_flipped is True
        assert group.display_type == 'image'

    def test_child_is_normalized(self, rotated_leaf, ids):
        tree, _ = wrap_as_group((rotated_leaf,), 'R', id_factory=ids)
        (child,) = tree[0].children
        assert child.id == 'R'
        assert isinstance(child, ImageLayer)
        assert child.src == 'r.png'
        assert child.position == Vec2(50, 50)
        assert child.rotation == 0
        assert child.rotation_x is None
        assert child.rotation_y is None
        assert child.anchor_point == Vec2(0.5, 0.5)
        assert child.size == Size(100, 100)

    def test_child_centered_on_non_square_group(self, ids):
        leaf = make_leaf('W', position=Vec2(7, 9), size=Size(40, 10))
        tree, _ = wrap_as_group((leaf,), 'W', id_factory=ids)
        assert tree[0].children[0].position == Vec2(20, 5)

    def test_near_center_anchor_kept(self, ids):
        anchor = Vec2(0.5 + 1e-7, 0.5 - 1e-7)
        leaf = make_leaf('N', anchor_point=anchor)
        tree, _ = wrap_as_group((leaf,), 'N', id_factory=ids)
        assert tree[0].children[0].anchor_point == anchor

    def test_anchor_outside_tolerance_forced(self, ids):
        leaf = make_leaf('N', anchor_point=Vec2(0.5, 0.5 + 1e-5))
        tree, _ = wrap_as_group((leaf,), 'N', id_factory=ids)
        assert tree[0].children[0].anchor_point == Vec2(0.5, 0.5)

    def test_wrap_in_place_nested(self, nested_tree, ids):
        tree, group_id = wrap_as_group(nested_tree, 'E', id_factory=ids)
        g2 = find_by_id(tree, 'g2')
        assert [c.id for c in g2.children] == [group_id]
        assert [c.id for c in g2.children[0].children] == ['E']
        assert tree[0] is nested_tree[0]
        assert tree[2] is nested_tree[2]
        assert tree[1].children[0] is nested_tree[1].children[0]

    def test_wrap_keeps_ids_unique(self, nested_tree):
        tree, group_id = wrap_as_group(nested_tree, 'C')
        all_ids = collect_ids(tree)
        assert len(all_ids) == len(set(all_ids)) == 8
        assert group_id in all_ids

    def test_wrapping_a_group_is_noop(self, nested_tree, ids):
        tree, group_id = wrap_as_group(nested_tree, 'g2', id_factory=ids)
        assert group_id is None
        assert tree == nested_tree

    def test_missing_target_is_noop(self, nested_tree, ids):
        tree, group_id = wrap_as_group(nested_tree, 'nope', id_factory=ids)
        assert group_id is None
        assert tree == nested_tree

    def test_source_tree_untouched(self, rotated_leaf, ids):
        tree = (rotated_leaf,)
        wrap_as_group(tree, 'R', id_factory=ids)
        assert tree[0] is rotated_leaf
        assert rotated_leaf.rotation == 30.0
        assert rotated_leaf.anchor_point == Vec2(0.2, 0.8)

    def test_default_factory(self, rotated_leaf):
        _, group_id = wrap_as_group((rotated_leaf,), 'R')
        assert group_id and group_id != 'R'


# ══════════════════════════════════════════════════════════════════════════
# Wrap neutrality
# ══════════════════════════════════════════════════════════════════════════

def _child_center_in_parent(group):
    """Where the wrapped child's center lands in the group's parent space."""
    child = group.children[0]
    # Child's bounds center, in group-local space (anchor is centered)
    local_x, local_y = child.position
    # Group-local origin is the top-left of its bounds; the group's anchor
    # sits at ``position`` and rotation pivots around it
    ax = group.anchor_point.x * group.size.w
    ay = group.anchor_point.y * group.size.h
    dx, dy = local_x - ax, local_y - ay
    angle = math.radians(group.rotation)
    rx = dx * math.cos(angle) - dy * math.sin(angle)
    ry = dx * math.sin(angle) + dy * math.cos(angle)
    return group.position.x + rx, group.position.y + ry


def _own_center_in_parent(layer):
    ax = layer.anchor_point.x * layer.size.w
    ay = layer.anchor_point.y * layer.size.h
    dx, dy = layer.size.w / 2 - ax, layer.size.h / 2 - ay
    angle = math.radians(layer.rotation)
    rx = dx * math.cos(angle) - dy * math.sin(angle)
    ry = dx * math.sin(angle) + dy * math.cos(angle)
    return layer.position.x + rx, layer.position.y + ry


@pytest.mark.parametrize('anchor, rotation', [
    (Vec2(0.2, 0.8), 30.0),
    (Vec2(0.0, 0.0), 90.0),
    (Vec2(0.5, 0.5), 45.0),
    (Vec2(1.0, 0.25), -120.0),
])
def test_wrap_keeps_content_center(anchor, rotation):
    leaf = make_leaf('L', position=Vec2(50, 50), size=Size(100, 60),
                     anchor_point=anchor, rotation=rotation)
    tree, _ = wrap_as_group((leaf,), 'L', id_factory=generate_layer_id)
    before = _own_center_in_parent(leaf)
    after = _child_center_in_parent(tree[0])
    assert after == pytest.approx(before)
