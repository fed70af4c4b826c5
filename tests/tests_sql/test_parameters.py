"""
========================================================
Pytest suite for sql/parameters.py and sql/values.py
========================================================

How to Execute:
---------------
All tests:          pytest tests/tests_sql/test_parameters.py -v
"""

import pytest

from sql.exceptions import ContractViolationError
from sql.parameters import BindRegistry, BoundParameter, bind_name
from sql.values import BindKind, infer_bind_kind


@pytest.mark.unit
@pytest.mark.parametrize("value, kind", [
    ('john', BindKind.STRING),
    (31, BindKind.INTEGER),
    (True, BindKind.BOOLEAN),
    (False, BindKind.BOOLEAN),
    (1.5, BindKind.STRING),
    (None, BindKind.STRING),
])
def test_infer_bind_kind(value, kind):
    assert infer_bind_kind(value) is kind


@pytest.mark.unit
def test_bind_name_replaces_non_word_characters():
    assert bind_name('users.name') == 'users_name'
    assert bind_name('age') == 'age'


@pytest.mark.unit
def test_allocate_prefers_plain_name_then_sequence():
    registry = BindRegistry()

    assert registry.allocate('age', 'min', 0, 10) == 'age_min'
    assert registry.allocate('age', 'min', 2, 30) == 'age_2_min'
    assert registry.allocate('age', 'min', 2, 50) == 'age_2_min_1'
    assert registry.as_dict() == {'age_min': 10, 'age_2_min': 30, 'age_2_min_1': 50}


@pytest.mark.unit
def test_register_infers_kind_and_keeps_order():
    registry = BindRegistry()
    registry.register('name', 'john')
    registry.register('limit', 10, BindKind.INTEGER)

    assert list(registry) == [
        BoundParameter('name', 'john', BindKind.STRING),
        BoundParameter('limit', 10, BindKind.INTEGER),
    ]
    assert len(registry) == 2


@pytest.mark.edge_case
def test_reserved_names_are_skipped_by_allocation():
    registry = BindRegistry()
    registry.reserve('name_0')

    assert 'name_0' in registry
    assert registry.allocate('name', '0', 4, 'x') == 'name_4_0'
    assert registry.as_dict() == {'name_4_0': 'x'}


@pytest.mark.edge_case
def test_reserve_twice_fails():
    registry = BindRegistry()
    registry.reserve('limit')

    with pytest.raises(ContractViolationError):
        registry.reserve('limit')


@pytest.mark.edge_case
def test_register_reserved_name_once():
    registry = BindRegistry()
    registry.reserve('limit')
    registry.register('limit', 5)

    with pytest.raises(ContractViolationError):
        registry.register('limit', 6)
