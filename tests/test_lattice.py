# tests/test_lattice.py
"""
Tests for the UNDEF / #c / NAC value lattice and its meet.
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from constprop.errors import LatticeError
from constprop.lattice import INT_MAX, INT_MIN, Kind, Value, meet_value, wrap_int32
from tests.conftest import NAC, UNDEF, const


# ============================================================
# Strategies
# ============================================================

# Small constant range so that equal constants show up often
values = st.one_of(
    st.just(UNDEF),
    st.just(NAC),
    st.integers(min_value=-3, max_value=3).map(Value.make_constant),
)


class TestValue:

    def test_singletons(self):
        assert Value.get_undef() is Value.get_undef()
        assert Value.get_nac() is Value.get_nac()

    def test_variant_tests(self):
        assert UNDEF.is_undef() and not UNDEF.is_constant() and not UNDEF.is_nac()
        assert NAC.is_nac() and not NAC.is_constant() and not NAC.is_undef()
        c = const(4)
        assert c.is_constant() and not c.is_undef() and not c.is_nac()
        assert c.kind is Kind.CONSTANT

    def test_get_constant(self):
        assert const(-17).get_constant() == -17

    @pytest.mark.parametrize("value", [UNDEF, NAC])
    def test_get_constant_on_non_constant_raises(self, value):
        with pytest.raises(LatticeError):
            value.get_constant()

    def test_lattice_error_is_value_error(self):
        with pytest.raises(ValueError):
            NAC.get_constant()

    def test_structural_equality(self):
        assert const(3) == const(3)
        assert const(3) != const(4)
        assert const(0) != UNDEF
        assert Value(Kind.UNDEF, 5) == UNDEF
        assert hash(const(9)) == hash(Value.make_constant(9))

    def test_constant_wraps_to_32_bits(self):
        assert const(2**31).get_constant() == INT_MIN
        assert const(2**32 + 5).get_constant() == 5
        assert const(-(2**31) - 1).get_constant() == INT_MAX
        assert Value(Kind.CONSTANT, 2**32) == const(0)

    def test_repr(self):
        assert repr(UNDEF) == "UNDEF"
        assert str(NAC) == "NAC"
        assert str(const(-2)) == "#-2"

    def test_leq(self):
        assert UNDEF.leq(const(1))
        assert const(1).leq(NAC)
        assert UNDEF.leq(NAC)
        assert const(1).leq(const(1))
        assert not const(1).leq(const(2))
        assert not NAC.leq(const(1))
        assert not const(1).leq(UNDEF)


class TestWrapInt32:

    @pytest.mark.parametrize("n,expected", [
        (0, 0),
        (INT_MAX, INT_MAX),
        (INT_MAX + 1, INT_MIN),
        (INT_MIN, INT_MIN),
        (INT_MIN - 1, INT_MAX),
        (0xFFFFFFFF, -1),
        (-(2**40) + 3, 3),
    ])
    def test_wrap(self, n, expected):
        assert wrap_int32(n) == expected


class TestMeetValue:

    @pytest.mark.parametrize("v1,v2,expected", [
        (const(1), const(1), const(1)),
        (const(1), const(2), NAC),
        (NAC, const(1), NAC),
        (const(1), NAC, NAC),
        (NAC, UNDEF, NAC),
        (UNDEF, const(5), const(5)),
        (const(5), UNDEF, const(5)),
        (UNDEF, UNDEF, UNDEF),
        (NAC, NAC, NAC),
    ])
    def test_table(self, v1, v2, expected):
        assert meet_value(v1, v2) == expected

    @given(values, values)
    def test_commutative(self, a, b):
        assert meet_value(a, b) == meet_value(b, a)

    @given(values, values, values)
    def test_associative(self, a, b, c):
        assert meet_value(a, meet_value(b, c)) == meet_value(meet_value(a, b), c)

    @given(values)
    def test_undef_is_identity(self, a):
        assert meet_value(a, UNDEF) == a

    @given(values)
    def test_nac_absorbs(self, a):
        assert meet_value(a, NAC) == NAC

    @given(values)
    def test_idempotent(self, a):
        assert meet_value(a, a) == a

    @given(values, values)
    def test_result_is_upper_bound(self, a, b):
        m = meet_value(a, b)
        assert a.leq(m) and b.leq(m)

    @given(values, values, values)
    def test_monotone(self, a, b, c):
        if a.leq(b):
            assert meet_value(a, c).leq(meet_value(b, c))
