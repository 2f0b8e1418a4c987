"""
Layer Tree Editor - Constants and Configuration

This module contains all constant values used by the layer tree core:
- Layer type tags (the discriminator values of the layer union)
- Default layer geometry and visual settings
- Clone (duplicate) behavior
- Group wrap normalization
"""

# ======================================================================
# LAYER TYPES
# ======================================================================
# Discriminator tags as they appear in the editor's plain-data payloads

LAYER_TYPE_GROUP = 'group'
LAYER_TYPE_BASIC = 'basic'
LAYER_TYPE_IMAGE = 'image'
LAYER_TYPE_TEXT = 'text'
LAYER_TYPE_SHAPE = 'shape'

# ======================================================================
# DEFAULT LAYER SETTINGS
# ======================================================================

DEFAULT_POSITION_X = 0.0
DEFAULT_POSITION_Y = 0.0
DEFAULT_SIZE_W = 100.0
DEFAULT_SIZE_H = 100.0
DEFAULT_OPACITY = 1.0
DEFAULT_ROTATION = 0.0  # Degrees

DEFAULT_LAYER_NAME = 'Layer'
DEFAULT_TEXT_FONT_FAMILY = 'SFProText-Regular'
DEFAULT_TEXT_FONT_SIZE = 16.0
DEFAULT_TEXT_COLOR = '#000000'
DEFAULT_SHAPE_FILL = '#FFFFFF'

# ======================================================================
# CLONE OFFSET
# ======================================================================

# Offset applied to the root of a deep clone to make duplication visible
CLONE_OFFSET_X = 10.0
CLONE_OFFSET_Y = 10.0

# Appended to the root name of a deep clone
COPY_NAME_SUFFIX = ' copy'

# ======================================================================
# GROUP WRAP
# ======================================================================

# Anchor point every wrapped child is normalized to (unit space, 0-1)
CENTER_ANCHOR_X = 0.5
CENTER_ANCHOR_Y = 0.5

# Anchors closer than this to the center on both axes are kept as-is
ANCHOR_TOLERANCE = 1e-6
