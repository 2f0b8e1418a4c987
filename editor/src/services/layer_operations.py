"""
Layer Tree Editor - Layer Operations Service

Structural editing of the layer tree. A tree is an ordered tuple of root
layers; GroupLayer children nest further layers. These functions never mutate
their input: each edit returns a new tree in which only the path from the root
to the edited layer is rebuilt, while untouched siblings and subtrees are the
same objects as in the input.

Traversal is always pre-order depth-first (a layer, then its children left to
right, then its next sibling), and the first match wins.

"Not found" is a normal outcome, never an error: lookups return None/False and
edits return the tree unchanged with a False/None status.
"""

import logging
from copy import deepcopy
from dataclasses import replace
from typing import Any, Callable, Dict, Iterator, List, NamedTuple, Optional, Sequence, Tuple

from models.layer import Layer, GroupLayer, patch_layer
from models.transform import Vec2
from utils.id_generator import IdFactory, resolve_id_factory
from constants import (
    CLONE_OFFSET_X, CLONE_OFFSET_Y,
    COPY_NAME_SUFFIX,
    CENTER_ANCHOR_X, CENTER_ANCHOR_Y,
    ANCHOR_TOLERANCE,
)

_logger = logging.getLogger('LayerOperations')

Layers = Tuple[Layer, ...]


class InsertResult(NamedTuple):
    inserted: bool
    layers: Layers


class RemoveResult(NamedTuple):
    removed: Optional[Layer]
    layers: Layers


class WrapResult(NamedTuple):
    layers: Layers
    new_group_id: Optional[str]


def _as_tree(layers: Sequence[Layer]) -> Layers:
    return layers if isinstance(layers, tuple) else tuple(layers)


# ========================================
# Traversal
# ========================================

def iter_layers(layers: Sequence[Layer]) -> Iterator[Layer]:
    """Yield every layer of the tree in pre-order"""
    for layer in layers:
        yield layer
        if isinstance(layer, GroupLayer):
            yield from iter_layers(layer.children)


def collect_ids(layers: Sequence[Layer]) -> List[str]:
    """All layer ids in pre-order (duplicates included, if any)"""
    return [layer.id for layer in iter_layers(layers)]


def find_by_id(layers: Sequence[Layer], layer_id: Optional[str]) -> Optional[Layer]:
    """Find a layer anywhere in the tree

    Args:
        layers: Tree to search
        layer_id: Id to look for; None or empty never matches

    Returns:
        First matching layer in pre-order, or None
    """
    if not layer_id:
        return None
    for layer in layers:
        if layer.id == layer_id:
            return layer
        if isinstance(layer, GroupLayer):
            found = find_by_id(layer.children, layer_id)
            if found is not None:
                return found
    return None


def contains_id(layers: Sequence[Layer], layer_id: Optional[str]) -> bool:
    """Check whether any layer in the tree has this id"""
    if not layer_id:
        return False
    for layer in layers:
        if layer.id == layer_id:
            return True
        if isinstance(layer, GroupLayer) and contains_id(layer.children, layer_id):
            return True
    return False


# ========================================
# Path rebuild
# ========================================

# Receives the sibling tuple holding the match and the match's index,
# returns the replacement sibling tuple
SiblingEdit = Callable[[Layers, int], Layers]


def _edit_first(layers: Layers, match: Callable[[Layer], bool], edit: SiblingEdit) -> Tuple[bool, Layers]:
    """Apply ``edit`` at the first layer (pre-order) satisfying ``match``

    Only the groups on the path to the match are rebuilt. When nothing
    matches, the input tuple itself is returned.

    Returns:
        (edited, new_layers)
    """
    for index, layer in enumerate(layers):
        if match(layer):
            return True, edit(layers, index)
        if isinstance(layer, GroupLayer):
            edited, children = _edit_first(layer.children, match, edit)
            if edited:
                rebuilt = replace(layer, children=children)
                return True, layers[:index] + (rebuilt,) + layers[index + 1:]
    return False, layers


def _match_id(layer_id: str) -> Callable[[Layer], bool]:
    return lambda layer: layer.id == layer_id


# ========================================
# Insertion
# ========================================

def insert_into_group(layers: Sequence[Layer], group_id: str, node: Layer,
                      index: Optional[int] = None) -> InsertResult:
    """Insert a layer into a group's children

    Args:
        layers: Tree to edit
        group_id: Id of the target group
        node: Layer to insert
        index: Position the layer should occupy among the children.
            None, negative, or past the end appends.

    Returns:
        InsertResult(inserted, layers); inserted is False and the tree is
        unchanged if no group has this id
    """
    tree = _as_tree(layers)

    def splice(siblings: Layers, at: int) -> Layers:
        group = siblings[at]
        children = group.children
        position = index if index is not None and 0 <= index <= len(children) else len(children)
        updated = replace(group, children=children[:position] + (node,) + children[position:])
        _logger.debug(f"Inserted layer {node.id} into group {group_id} at {position}")
        return siblings[:at] + (updated,) + siblings[at + 1:]

    inserted, result = _edit_first(
        tree,
        lambda layer: isinstance(layer, GroupLayer) and layer.id == group_id,
        splice,
    )
    if not inserted:
        _logger.debug(f"Insert into group skipped: no group {group_id}")
    return InsertResult(inserted, result)


def insert_before(layers: Sequence[Layer], target_id: str, node: Layer) -> InsertResult:
    """Insert a layer immediately before a sibling, at any depth"""
    inserted, result = _edit_first(
        _as_tree(layers),
        _match_id(target_id),
        lambda siblings, at: siblings[:at] + (node,) + siblings[at:],
    )
    if inserted:
        _logger.debug(f"Inserted layer {node.id} before {target_id}")
    else:
        _logger.debug(f"Insert before skipped: {target_id} not found")
    return InsertResult(inserted, result)


def insert_after(layers: Sequence[Layer], target_id: str, node: Layer) -> InsertResult:
    """Insert a layer immediately after a sibling, at any depth"""
    inserted, result = _edit_first(
        _as_tree(layers),
        _match_id(target_id),
        lambda siblings, at: siblings[:at + 1] + (node,) + siblings[at + 1:],
    )
    if inserted:
        _logger.debug(f"Inserted layer {node.id} after {target_id}")
    else:
        _logger.debug(f"Insert after skipped: {target_id} not found")
    return InsertResult(inserted, result)


# ========================================
# Update / removal
# ========================================

def update_in_tree(layers: Sequence[Layer], layer_id: str, patch: Dict[str, Any]) -> Layers:
    """Shallow-merge a patch into a layer's fields

    Args:
        layers: Tree to edit
        layer_id: Id of the layer to patch
        patch: Field name or plain-data key -> new value. Keys that are not
            fields of the layer's variant go into its meta. 'id' and 'type'
            are never patched.

    Returns:
        New tree; the input tree unchanged if the id is not found
    """
    def apply(siblings: Layers, at: int) -> Layers:
        _logger.debug(f"Patched layer {layer_id}: {sorted(patch)}")
        return siblings[:at] + (patch_layer(siblings[at], patch),) + siblings[at + 1:]

    updated, result = _edit_first(_as_tree(layers), _match_id(layer_id), apply)
    if not updated:
        _logger.debug(f"Update skipped: {layer_id} not found")
    return result


def remove_from_tree(layers: Sequence[Layer], layer_id: str) -> RemoveResult:
    """Excise a layer (with its subtree) and hand it back

    Returns:
        RemoveResult(removed, layers); removed is the excised layer object
        itself, or None if the id is not found
    """
    removed: List[Layer] = []

    def excise(siblings: Layers, at: int) -> Layers:
        removed.append(siblings[at])
        return siblings[:at] + siblings[at + 1:]

    found, result = _edit_first(_as_tree(layers), _match_id(layer_id), excise)
    if found:
        _logger.debug(f"Removed layer {layer_id}")
        return RemoveResult(removed[0], result)
    _logger.debug(f"Remove skipped: {layer_id} not found")
    return RemoveResult(None, result)


def delete_in_tree(layers: Sequence[Layer], layer_id: str) -> Layers:
    """Delete a layer (with its subtree); no-op if the id is not found"""
    return remove_from_tree(layers, layer_id).layers


# ========================================
# Clone / wrap
# ========================================

def _clone_subtree(layer: Layer, new_id: IdFactory) -> Layer:
    """Copy a layer by value with fresh ids throughout, names/positions unchanged"""
    if isinstance(layer, GroupLayer):
        children = tuple(_clone_subtree(child, new_id) for child in layer.children)
        base = replace(layer, children=())
        return replace(deepcopy(base), id=new_id(), children=children)
    return replace(deepcopy(layer), id=new_id())


def clone_deep(layer: Layer, id_factory: IdFactory = None) -> Layer:
    """Duplicate a layer and its whole subtree

    Every layer in the copy gets a new id. Only the copy's root is renamed
    ("<name> copy") and offset by (CLONE_OFFSET_X, CLONE_OFFSET_Y); descendants
    keep their names and positions.

    Args:
        layer: Layer to duplicate
        id_factory: Id source (default: UUID4)

    Returns:
        Independent copy sharing no mutable state with the source
    """
    new_id = resolve_id_factory(id_factory)
    copied = _clone_subtree(layer, new_id)
    clone = replace(
        copied,
        name=f"{layer.name}{COPY_NAME_SUFFIX}",
        position=layer.position.offset(CLONE_OFFSET_X, CLONE_OFFSET_Y),
    )
    _logger.debug(f"Cloned layer {layer.id} -> {clone.id}")
    return clone


def _is_centered(anchor: Vec2) -> bool:
    return (abs(anchor.x - CENTER_ANCHOR_X) <= ANCHOR_TOLERANCE
            and abs(anchor.y - CENTER_ANCHOR_Y) <= ANCHOR_TOLERANCE)


def _wrap_layer(layer: Layer, group_id: str) -> GroupLayer:
    """Build a group standing in for ``layer`` with a normalized copy as its only child

    The group takes over the layer's placement and transform. The child keeps
    its id and is re-centered in the group's local space with no rotation, so
    the wrapped content renders where it did before.
    """
    anchor = layer.anchor_point if _is_centered(layer.anchor_point) else Vec2(CENTER_ANCHOR_X, CENTER_ANCHOR_Y)
    child = replace(
        deepcopy(layer),
        rotation=0.0,
        rotation_x=None,
        rotation_y=None,
        anchor_point=anchor,
        position=layer.size.center,
    )
    return GroupLayer(
        id=group_id,
        name=layer.name,
        position=layer.position,
        size=layer.size,
        anchor_point=layer.anchor_point,
        opacity=layer.opacity,
        rotation=layer.rotation,
        rotation_x=layer.rotation_x,
        rotation_y=layer.rotation_y,
        geometry_flipped=layer.geometry_flipped,
        children=(child,),
        display_type=layer.type,
    )


def wrap_as_group(layers: Sequence[Layer], target_id: str, id_factory: IdFactory = None) -> WrapResult:
    """Replace a layer with a new group containing it

    Args:
        layers: Tree to edit
        target_id: Id of the layer to wrap
        id_factory: Id source for the new group (default: UUID4)

    Returns:
        WrapResult(layers, new_group_id); new_group_id is None and the tree
        unchanged if the target is missing or already a group
    """
    tree = _as_tree(layers)
    target = find_by_id(tree, target_id)
    if target is None:
        _logger.debug(f"Wrap skipped: {target_id} not found")
        return WrapResult(tree, None)
    if isinstance(target, GroupLayer):
        _logger.debug(f"Wrap skipped: {target_id} is already a group")
        return WrapResult(tree, None)

    group_id = resolve_id_factory(id_factory)()
    group = _wrap_layer(target, group_id)
    _, result = _edit_first(
        tree,
        _match_id(target_id),
        lambda siblings, at: siblings[:at] + (group,) + siblings[at + 1:],
    )
    _logger.debug(f"Wrapped layer {target_id} in group {group_id}")
    return WrapResult(result, group_id)
