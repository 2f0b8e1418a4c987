"""
Layer Tree Editor - Layer Model

Layers form a closed tagged union. Every variant shares identity, name and the
common visual transform fields; GroupLayer is the only variant with children.
The discriminator is the class-level ``type`` tag, so code narrows on a layer
with ``isinstance`` rather than by reading the tag.

Layers are frozen: editing a tree always produces new layer values (see
services.layer_operations), and trees are plain tuples of layers.

Plain-data conversion:
    The editor UI hands layers around as plain dicts with camelCase keys
    (``anchorPoint``, ``rotationX``, ``geometryFlipped``...). layer_from_dict /
    layer_to_dict convert between the two. Keys that are not fields of the
    variant are carried in ``meta`` so nothing the UI attaches is lost.

Usage:
    layer = layer_from_dict({'id': 'a1', 'type': 'text', 'text': 'Hello'})
    data = layer_to_dict(layer)
"""

import logging
from copy import deepcopy
from dataclasses import dataclass, field, fields, replace
from typing import Any, ClassVar, Dict, Iterable, List, Optional, Tuple, Type

from models.transform import Vec2, Size
from utils.logger import loggerRaise
from constants import (
    LAYER_TYPE_GROUP, LAYER_TYPE_BASIC, LAYER_TYPE_IMAGE,
    LAYER_TYPE_TEXT, LAYER_TYPE_SHAPE,
    DEFAULT_POSITION_X, DEFAULT_POSITION_Y,
    DEFAULT_SIZE_W, DEFAULT_SIZE_H,
    DEFAULT_OPACITY, DEFAULT_ROTATION,
    DEFAULT_LAYER_NAME,
    DEFAULT_TEXT_FONT_FAMILY, DEFAULT_TEXT_FONT_SIZE, DEFAULT_TEXT_COLOR,
    DEFAULT_SHAPE_FILL,
    CENTER_ANCHOR_X, CENTER_ANCHOR_Y,
)

_logger = logging.getLogger('Layer')


# ========================================
# Layer variants
# ========================================

@dataclass(frozen=True)
class Layer:
    """Fields shared by every layer variant

    Properties:
        id: Opaque unique identifier, never changed once assigned
        name: Display label
        position: Position in the parent's coordinate space
        size: Width/height of the layer bounds
        anchor_point: Unit-space point the position and rotation refer to
        opacity: 0-1
        rotation: Degrees around the z axis
        rotation_x: Optional rotation around the x axis (degrees)
        rotation_y: Optional rotation around the y axis (degrees)
        geometry_flipped: Whether the layer's geometry is flipped vertically
        meta: Extra plain-data properties attached by the UI
    """
    type: ClassVar[str] = ''

    id: str
    name: str = DEFAULT_LAYER_NAME
    position: Vec2 = Vec2(DEFAULT_POSITION_X, DEFAULT_POSITION_Y)
    size: Size = Size(DEFAULT_SIZE_W, DEFAULT_SIZE_H)
    anchor_point: Vec2 = Vec2(CENTER_ANCHOR_X, CENTER_ANCHOR_Y)
    opacity: float = DEFAULT_OPACITY
    rotation: float = DEFAULT_ROTATION
    rotation_x: Optional[float] = None
    rotation_y: Optional[float] = None
    geometry_flipped: bool = False
    meta: Dict[str, Any] = field(default_factory=dict, hash=False)

    @property
    def is_group(self) -> bool:
        return isinstance(self, GroupLayer)

    def __repr__(self):
        return f"{type(self).__name__}(id='{self.id}', name='{self.name}')"


@dataclass(frozen=True, repr=False)
class BasicLayer(Layer):
    """Plain rectangle layer"""
    type: ClassVar[str] = LAYER_TYPE_BASIC

    background_color: Optional[str] = None
    corner_radius: float = 0.0


@dataclass(frozen=True, repr=False)
class ImageLayer(Layer):
    """Bitmap layer"""
    type: ClassVar[str] = LAYER_TYPE_IMAGE

    src: str = ''
    fit: str = 'fill'


@dataclass(frozen=True, repr=False)
class TextLayer(Layer):
    type: ClassVar[str] = LAYER_TYPE_TEXT

    text: str = ''
    font_family: str = DEFAULT_TEXT_FONT_FAMILY
    font_size: float = DEFAULT_TEXT_FONT_SIZE
    color: str = DEFAULT_TEXT_COLOR
    align: str = 'left'


@dataclass(frozen=True, repr=False)
class ShapeLayer(Layer):
    type: ClassVar[str] = LAYER_TYPE_SHAPE

    shape: str = 'rect'
    fill: str = DEFAULT_SHAPE_FILL
    stroke: Optional[str] = None
    stroke_width: float = 0.0


@dataclass(frozen=True, repr=False)
class GroupLayer(Layer):
    """Layer owning an ordered sequence of child layers

    Properties:
        children: Child layers in paint order (tuple, possibly empty)
        display_type: Type tag of the content this group stands in for,
            set when a layer is wrapped into a group
    """
    type: ClassVar[str] = LAYER_TYPE_GROUP

    children: Tuple[Layer, ...] = ()
    display_type: Optional[str] = None

    def __post_init__(self):
        # Accept any iterable of children, always store a tuple
        if not isinstance(self.children, tuple):
            object.__setattr__(self, 'children', tuple(self.children))

    def __repr__(self):
        return f"GroupLayer(id='{self.id}', name='{self.name}', children={len(self.children)})"


LAYER_TYPES: Dict[str, Type[Layer]] = {
    cls.type: cls
    for cls in (GroupLayer, BasicLayer, ImageLayer, TextLayer, ShapeLayer)
}


def layer_class_for(type_tag: str) -> Type[Layer]:
    """Get the layer class for a discriminator tag

    Raises:
        ValueError: If no variant uses this tag
    """
    cls = LAYER_TYPES.get(type_tag)
    if cls is None:
        loggerRaise(ValueError(f"Unknown layer type '{type_tag}'"),
                    f"Cannot build layer: unknown type '{type_tag}'")
    return cls


def field_names(cls: Type[Layer]) -> Tuple[str, ...]:
    """Names of the data fields of a layer class (excludes the type tag)"""
    return tuple(f.name for f in fields(cls))


# ========================================
# Plain-data conversion
# ========================================

_POINT_FIELDS = ('position', 'anchor_point')
_SIZE_FIELDS = ('size',)

# Keys that do not follow the plain snake_case -> camelCase rule
_KEY_OVERRIDES = {
    'display_type': '_displayType',
}


def _to_key(name: str) -> str:
    """Field name to plain-data key (anchor_point -> anchorPoint)"""
    if name in _KEY_OVERRIDES:
        return _KEY_OVERRIDES[name]
    head, *rest = name.split('_')
    return head + ''.join(part.capitalize() for part in rest)


def _fields_by_key(cls: Type[Layer]) -> Dict[str, str]:
    """Map both field names and plain-data keys to field names (meta excluded)"""
    mapping = {}
    for name in field_names(cls):
        if name == 'meta':
            continue
        mapping[name] = name
        mapping[_to_key(name)] = name
    return mapping


def _point_from_data(value, default: Vec2) -> Vec2:
    if value is None:
        return default
    if isinstance(value, Vec2):
        return value
    return Vec2(float(value.get('x', default.x)), float(value.get('y', default.y)))


def _size_from_data(value, default: Size) -> Size:
    if value is None:
        return default
    if isinstance(value, Size):
        return value
    return Size(float(value.get('w', default.w)), float(value.get('h', default.h)))


def _field_value(name: str, value: Any, default: Any) -> Any:
    """Coerce a plain-data value into the type stored on field ``name``

    Args:
        name: Field name
        value: Incoming value (plain data or already a model value)
        default: Value used for missing point/size components
    """
    if name in _POINT_FIELDS:
        return _point_from_data(value, default)
    if name in _SIZE_FIELDS:
        return _size_from_data(value, default)
    if name == 'children':
        return tuple(
            layer_from_dict(child) if isinstance(child, dict) else child
            for child in value or ()
        )
    return deepcopy(value)


def layer_from_dict(data: Dict[str, Any]) -> Layer:
    """Build a layer (and, for groups, its subtree) from plain data

    Args:
        data: Layer dict with at least 'id' and 'type'

    Returns:
        Layer instance of the variant named by data['type']

    Raises:
        ValueError: If 'id' is missing or 'type' names no known variant
    """
    layer_id = data.get('id')
    if not layer_id:
        loggerRaise(ValueError("Layer data has no 'id'"),
                    f"Cannot build layer from data with keys {sorted(data)}")

    cls = layer_class_for(data.get('type'))
    kwargs: Dict[str, Any] = {}
    meta: Dict[str, Any] = dict(deepcopy(data.get('meta') or {}))
    known_keys = {'type', 'meta'}

    for f in fields(cls):
        if f.name == 'meta':
            continue
        key = _to_key(f.name)
        known_keys.add(key)
        if key in data:
            kwargs[f.name] = _field_value(f.name, data[key], f.default)

    for key, value in data.items():
        if key in known_keys:
            continue
        if key == 'children':
            # Only groups own children
            _logger.warning(f"Dropping 'children' on non-group layer '{layer_id}'")
            continue
        meta[key] = deepcopy(value)
    meta.pop('children', None)

    layer = cls(meta=meta, **kwargs)
    _logger.debug(f"Built {cls.__name__} '{layer.id}' from data")
    return layer


def layer_to_dict(layer: Layer) -> Dict[str, Any]:
    """Convert a layer (and its subtree) to plain data

    Optional fields that are unset (rotation_x/rotation_y, display_type) are
    omitted. Entries of ``meta`` are written back as top-level keys, except
    'children' which only a group may carry.
    """
    data: Dict[str, Any] = {'type': layer.type}
    for f in fields(layer):
        if f.name == 'meta':
            continue
        value = getattr(layer, f.name)
        if value is None and f.name in ('rotation_x', 'rotation_y', 'display_type'):
            continue
        if f.name in _POINT_FIELDS:
            value = {'x': value.x, 'y': value.y}
        elif f.name in _SIZE_FIELDS:
            value = {'w': value.w, 'h': value.h}
        elif f.name == 'children':
            value = [layer_to_dict(child) for child in value]
        else:
            value = deepcopy(value)
        data[_to_key(f.name)] = value

    for key, value in layer.meta.items():
        if key == 'children':
            continue
        data.setdefault(key, deepcopy(value))
    return data


def patch_layer(layer: Layer, patch: Dict[str, Any]) -> Layer:
    """Shallow-merge a patch into a copy of a layer

    Keys may be field names or plain-data keys (``anchor_point`` or
    ``anchorPoint``). Point and size values may be given as plain dicts.
    Keys that are not fields of the variant are merged into a copy of
    ``meta``, as layer_from_dict does. 'id' and 'type' never change, and
    'children' is ignored on non-group layers.

    Returns:
        New layer; the input layer is not modified
    """
    by_key = _fields_by_key(type(layer))
    changes: Dict[str, Any] = {}
    meta: Optional[Dict[str, Any]] = None

    for key, value in patch.items():
        if key in ('id', 'type'):
            _logger.warning(f"Ignoring '{key}' in patch for layer {layer.id}: it is immutable")
            continue
        name = by_key.get(key)
        if name is not None:
            changes[name] = _field_value(name, value, getattr(layer, name))
            continue
        if key == 'children':
            _logger.warning(f"Ignoring 'children' in patch for non-group layer {layer.id}")
            continue
        if meta is None:
            meta = dict(layer.meta)
        if key == 'meta':
            meta.update(deepcopy(value or {}))
        else:
            meta[key] = deepcopy(value)

    if meta is not None:
        changes['meta'] = meta
    return replace(layer, **changes)


def layers_from_dicts(data_list: Iterable[Dict[str, Any]]) -> Tuple[Layer, ...]:
    """Build a layer tree (tuple of root layers) from a list of dicts"""
    return tuple(layer_from_dict(data) for data in data_list)


def layers_to_dicts(layers: Iterable[Layer]) -> List[Dict[str, Any]]:
    return [layer_to_dict(layer) for layer in layers]
