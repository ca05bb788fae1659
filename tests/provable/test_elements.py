"""
회로 값(Field, Bool)과 기본 디스크립터 테스트.

테스트 대상:
  - Field: 상수 접기, 연산자, 단언, to_constant
  - Field 연산이 검사 실행 안에서 만드는 변수와 게이트
  - Bool
  - Field.provable / Bool.provable: 크기, 왕복, JSON, 해시 입력, check
"""

import pytest

from zkp.provable.circuit import current_engine
from zkp.provable.element import Bool, Field
from zkp.provable.errors import ConstraintViolationError, ProvableError
from zkp.provable.field import CURVE_ORDER, FR
from zkp.provable.provable import (
    as_prover,
    constraint_system,
    run_and_check,
    run_unchecked,
    witness,
)


# ─────────────────────────────────────────────────────────────────────
# Field 상수 테스트
# ─────────────────────────────────────────────────────────────────────

class TestFieldConstant:
    """회로 밖 Field 상수 연산."""

    def test_creation(self):
        assert int(Field(5)) == 5
        assert int(Field(FR(7))) == 7
        assert int(Field(Field(9))) == 9
        assert Field(CURVE_ORDER + 3).to_bigint() == 3

    def test_is_constant(self):
        assert Field(1).is_constant() is True
        assert Field(1).to_constant().is_constant() is True

    def test_operators(self):
        x = Field(6)
        assert int(x + 1) == 7
        assert int(1 + x) == 7
        assert int(x - 10) == CURVE_ORDER - 4
        assert int(10 - x) == 4
        assert int(x * 7) == 42
        assert int(7 * x) == 42
        assert int(-x) == CURVE_ORDER - 6
        assert int(x.square()) == 36

    def test_assert_equals(self):
        Field(3).assert_equals(3)
        with pytest.raises(ConstraintViolationError):
            Field(3).assert_equals(Field(4))

    def test_assert_equals_custom_message(self):
        with pytest.raises(ConstraintViolationError, match="different"):
            Field(3).assert_equals(4, "different")

    def test_assert_boolean(self):
        Field(0).assert_boolean()
        Field(1).assert_boolean()
        with pytest.raises(ConstraintViolationError):
            Field(2).assert_boolean()

    def test_random_in_field(self):
        values = {Field.random().to_bigint() for _ in range(4)}
        assert all(0 <= v < CURVE_ORDER for v in values)
        assert len(values) > 1

    def test_repr(self):
        assert repr(Field(5)) == "Field(5)"
        assert repr(Field.from_variable(3)) == "Field(var=3)"


# ─────────────────────────────────────────────────────────────────────
# 검사 실행 안 Field 연산
# ─────────────────────────────────────────────────────────────────────

def _gates():
    return current_engine().circuit.n


class TestFieldInCircuit:
    """변수 Field 연산이 게이트를 만든다."""

    def test_variable_arithmetic(self):
        """x³ + x + 5 = 35 (x=3)."""
        def body():
            x = witness(Field.provable, lambda: Field(3))
            x3 = x * x * x
            result = x3 + x + 5
            result.assert_equals(35)
            return as_prover(lambda: int(result)), _gates(), result.is_constant()

        value, gates, constant = run_and_check(body)
        assert value == 35
        # 곱셈 2, 덧셈 1, 상수덧셈 1, 상수동치 1
        assert gates == 5
        assert constant is False

    def test_wrong_assertion_fails(self):
        def body():
            x = witness(Field.provable, lambda: Field(4))
            (x * x).assert_equals(15)

        with pytest.raises(ConstraintViolationError):
            run_and_check(body)

    def test_wrong_assertion_passes_unchecked(self):
        def body():
            x = witness(Field.provable, lambda: Field(4))
            (x * x).assert_equals(15)
            return _gates()

        assert run_unchecked(body) == 2

    def test_subtraction_and_negation(self):
        def body():
            x = witness(Field.provable, lambda: Field(10))
            y = witness(Field.provable, lambda: Field(4))
            diffs = [x - y, y - x, 20 - x, -y]
            return as_prover(lambda: [int(d) for d in diffs])

        assert run_and_check(body) == [6, CURVE_ORDER - 6, 10, CURVE_ORDER - 4]

    def test_equality_between_variables(self):
        def body():
            x = witness(Field.provable, lambda: Field(8))
            y = witness(Field.provable, lambda: Field(8))
            x.assert_equals(y)
            return _gates()

        assert run_and_check(body) == 1

    def test_prover_block_folds_to_constants(self):
        """증명자 블록 안의 연산은 게이트 없이 값을 계산한다."""
        def body():
            x = witness(Field.provable, lambda: Field(5))
            before = _gates()
            doubled = as_prover(lambda: x * 2)
            return doubled.is_constant(), int(doubled), _gates() - before

        assert run_and_check(body) == (True, 10, 0)

    def test_to_constant_detaches(self):
        def body():
            x = witness(Field.provable, lambda: Field(11))
            return as_prover(x.to_constant)

        c = run_and_check(body)
        assert c.is_constant()
        assert int(c) == 11

    def test_reading_outside_prover_block_fails(self):
        """검사 실행에서도 증명자 블록 밖의 변수 값 읽기는 거부된다."""
        def branchy():
            x = witness(Field.provable, lambda: Field(3))
            if int(x) == 3:
                x.assert_equals(3)

        with pytest.raises(ProvableError):
            run_and_check(branchy)
        with pytest.raises(ProvableError):
            run_unchecked(branchy)
        with pytest.raises(ProvableError):
            constraint_system(branchy)

    def test_reading_bool_outside_prover_block_fails(self):
        def body():
            flag = witness(Bool.provable, lambda: Bool(True))
            return flag.to_boolean()

        with pytest.raises(ProvableError):
            run_and_check(body)

    def test_reading_symbolic_value_fails(self):
        """제약 시스템 분석 중에는 변수 값을 읽을 수 없다."""
        def body():
            x = witness(Field.provable, lambda: Field(1))
            return int(x)

        with pytest.raises(ProvableError):
            constraint_system(body)


# ─────────────────────────────────────────────────────────────────────
# Bool 테스트
# ─────────────────────────────────────────────────────────────────────

class TestBool:
    """Bool 테스트."""

    def test_from_python_bool(self):
        assert Bool(True).to_boolean() is True
        assert Bool(False).to_boolean() is False
        assert int(Bool(True).to_field()) == 1

    def test_not(self):
        assert Bool(True).not_().to_boolean() is False
        assert Bool(False).not_().to_boolean() is True

    def test_assert_equals(self):
        Bool(True).assert_equals(True)
        with pytest.raises(ConstraintViolationError):
            Bool(True).assert_equals(Bool(False))

    def test_repr(self):
        assert repr(Bool(True)) == "Bool(True)"


# ─────────────────────────────────────────────────────────────────────
# 디스크립터 테스트
# ─────────────────────────────────────────────────────────────────────

class TestFieldType:
    """Field.provable 디스크립터 테스트."""

    def test_size(self):
        assert Field.provable.size_in_fields() == 1

    def test_roundtrip(self):
        t = Field.provable
        x = Field(12345)
        restored = t.from_fields(t.to_fields(x), t.to_auxiliary(x))
        assert int(restored) == 12345
        assert t.to_json(restored) == t.to_json(x)

    def test_accepts_int(self):
        assert [int(f) for f in Field.provable.to_fields(7)] == [7]

    def test_no_auxiliary(self):
        assert Field.provable.to_auxiliary() == []

    def test_json(self):
        t = Field.provable
        assert t.to_json(Field(CURVE_ORDER - 1)) == str(CURVE_ORDER - 1)
        assert int(t.from_json("42")) == 42

    def test_to_input(self):
        hi = Field.provable.to_input(Field(3))
        assert [int(f) for f in hi.fields] == [3]
        assert hi.packed == []

    def test_capabilities(self):
        assert Field.provable.has_json is True
        assert Field.provable.has_input is True


class TestBoolType:
    """Bool.provable 디스크립터 테스트."""

    def test_roundtrip(self):
        t = Bool.provable
        for b in (Bool(True), Bool(False)):
            restored = t.from_fields(t.to_fields(b), t.to_auxiliary(b))
            assert restored.to_boolean() == b.to_boolean()
            assert t.to_json(restored) == t.to_json(b)

    def test_json(self):
        t = Bool.provable
        assert t.to_json(Bool(True)) is True
        assert t.from_json(False).to_boolean() is False
        with pytest.raises(TypeError):
            t.from_json(1)

    def test_to_input_is_packed(self):
        hi = Bool.provable.to_input(Bool(True))
        assert hi.fields == []
        assert len(hi.packed) == 1
        field, bits = hi.packed[0]
        assert int(field) == 1
        assert bits == 1

    def test_check_constant(self):
        Bool.provable.check(Bool(True))
        with pytest.raises(ConstraintViolationError):
            Bool.provable.check(Bool(Field(2)))

    def test_check_in_circuit(self):
        """run_and_check 안에서 불리언이 아닌 증인은 거부된다."""
        with pytest.raises(ConstraintViolationError):
            run_and_check(lambda: witness(Bool.provable, lambda: Bool(Field(2))))

    def test_check_emits_boolean_gate(self):
        cs = constraint_system(lambda: witness(Bool.provable, lambda: Bool(True)))
        assert cs.rows == 1
        assert cs.gates[0]["coeffs"] == [str(CURVE_ORDER - 1), "0", "0", "1", "0"]
