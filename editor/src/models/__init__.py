"""
Layer Tree Editor - Data Models

This module contains the layer value types the tree editor operates on.

Public API: Import the layer variants and conversion helpers from models.layer,
geometry values from models.transform.
"""

from .transform import Vec2, Size
from .layer import (
    Layer, GroupLayer, BasicLayer, ImageLayer, TextLayer, ShapeLayer,
    LAYER_TYPES, layer_class_for,
    layer_from_dict, layer_to_dict, layers_from_dicts, layers_to_dicts, patch_layer,
)

__all__ = [
    'Vec2', 'Size',
    'Layer', 'GroupLayer', 'BasicLayer', 'ImageLayer', 'TextLayer', 'ShapeLayer',
    'LAYER_TYPES', 'layer_class_for',
    'layer_from_dict', 'layer_to_dict', 'layers_from_dicts', 'layers_to_dicts', 'patch_layer',
]
