"""
Shared fixtures for Layer Tree Editor tests.

Provides small layer trees, a deterministic id factory, and helpers.
"""
import sys
import os
import pytest

# Ensure editor/src is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'editor', 'src'))

from models.layer import BasicLayer, GroupLayer, ImageLayer, ShapeLayer, TextLayer
from models.transform import Vec2, Size
from utils.id_generator import SequentialIdGenerator


# ── Sample layers ───────────────────────────────────────────────────────

def make_leaf(layer_id, cls=BasicLayer, **fields):
    """Leaf layer named after its id"""
    fields.setdefault('name', layer_id)
    return cls(id=layer_id, **fields)


@pytest.fixture
def ids():
    """Deterministic id factory"""
    return SequentialIdGenerator(prefix='new')


@pytest.fixture
def scenario_tree():
    """[A, g1{B, C}]"""
    a = make_leaf('A', position=Vec2(5, 5))
    b = make_leaf('B', TextLayer, text='hello')
    c = make_leaf('C', ImageLayer, src='c.png')
    g1 = GroupLayer(id='g1', name='Group 1', children=(b, c))
    return (a, g1)


@pytest.fixture
def nested_tree():
    """[A, g1{B, g2{E}, C}, F]"""
    e = make_leaf('E', ShapeLayer, shape='ellipse')
    g2 = GroupLayer(id='g2', name='Group 2', position=Vec2(20, 20), children=(e,))
    g1 = GroupLayer(id='g1', name='Group 1', children=(
        make_leaf('B', TextLayer, text='b'),
        g2,
        make_leaf('C', ImageLayer, src='c.png'),
    ))
    return (make_leaf('A'), g1, make_leaf('F'))


@pytest.fixture
def rotated_leaf():
    """Leaf with an off-center anchor and rotation"""
    return make_leaf(
        'R', ImageLayer,
        src='r.png',
        position=Vec2(50, 50),
        size=Size(100, 100),
        rotation=30.0,
        rotation_x=10.0,
        rotation_y=-5.0,
        anchor_point=Vec2(0.2, 0.8),
        opacity=0.6,
        geometry_flipped=True,
    )
