"""
회로 값: Field, Bool
=====================

**Field**:
  회로의 원자 단위. 두 가지 상태 중 하나이다:
  - 상수(constant): FR 값을 직접 안다
  - 변수(variable): 활성 회로 엔진의 변수 인덱스를 가리키며,
    값은 증명자(prover)만 알고 제약으로 묶인다. 값 읽기(int, to_fr)는
    증명자 블록 안에서만 가능하다

  연산 규칙:
  | 피연산자          | 실행 위치                  | 결과                      |
  |-------------------|----------------------------|---------------------------|
  | 모두 상수         | 어디서나                   | 상수 (상수 접기)          |
  | 변수 포함         | 증명자 블록 안             | 증인 값으로 계산한 상수   |
  | 변수 포함         | 검사 실행 / 분석           | 새 변수 + 일반 게이트     |

**Bool**:
  Field 하나를 감싼 불리언. 디스크립터의 check가 x·x = x 제약을 건다.

**디스크립터**:
  Field.provable, Bool.provable: ProvableType 구현. 배열 결합자나
  witness()에 넘기는 타입이다.

사용 예시:
    >>> from zkp.provable.provable import witness, run_and_check
    >>> def circuit():
    ...     x = witness(Field.provable, lambda: Field(3))
    ...     (x * x + x).assert_equals(12)
    >>> run_and_check(circuit)
"""

from zkp.provable.circuit import current_engine
from zkp.provable.context import in_checked_computation, in_prover
from zkp.provable.errors import ConstraintViolationError
from zkp.provable.field import FR, random_fr, to_fr
from zkp.provable.types import HashInput, ProvableType


class Field:
    """회로 필드 원소 (상수 또는 변수)."""

    __slots__ = ("_value", "_var")

    def __init__(self, value):
        if isinstance(value, Field):
            self._value = value._value
            self._var = value._var
        else:
            self._value = to_fr(value)
            self._var = None

    @classmethod
    def from_variable(cls, var):
        field = cls.__new__(cls)
        field._value = None
        field._var = var
        return field

    @classmethod
    def random(cls):
        return cls(random_fr())

    @property
    def var(self):
        return self._var

    def is_constant(self):
        return self._var is None

    def to_fr(self):
        """값을 FR로 반환한다.

        변수라면 활성 엔진의 증인 값을 읽는다. 이 읽기는 증명자 블록
        (as_prover, witness의 compute) 안에서만 허용된다.

        Raises:
            ProvableError: 증명자 블록 밖에서 변수 값을 읽을 때
        """
        if self._var is None:
            return self._value
        return current_engine().value_of(self._var)

    def to_constant(self):
        """변수 연결을 끊은 상수 Field를 반환한다."""
        if self.is_constant():
            return self
        return Field(self.to_fr())

    def to_bigint(self):
        return int(self.to_fr())

    def __int__(self):
        return self.to_bigint()

    # ── 산술 ──

    def _folds(self, other):
        # 변수가 없거나 증명자 블록 안이면 게이트 없이 값을 계산한다
        if self.is_constant() and other.is_constant():
            return True
        return in_prover() or not in_checked_computation()

    def _witness_var(self, compute):
        (var,) = current_engine().exists(1, lambda: [compute()])
        return var

    def add(self, other):
        other = _as_field(other)
        if self._folds(other):
            return Field(self.to_fr() + other.to_fr())
        if not self.is_constant() and not other.is_constant():
            out = self._witness_var(lambda: self.to_fr() + other.to_fr())
            current_engine().circuit.add_addition_gate(self._var, other._var, out)
            return Field.from_variable(out)
        var, const = (self, other) if other.is_constant() else (other, self)
        out = self._witness_var(lambda: var.to_fr() + const._value)
        current_engine().circuit.add_constant_gate(var._var, const._value, out)
        return Field.from_variable(out)

    def sub(self, other):
        other = _as_field(other)
        if self._folds(other):
            return Field(self.to_fr() - other.to_fr())
        if other.is_constant():
            return self.add(Field(FR(0) - other._value))
        if self.is_constant():
            return other.neg().add(self)
        out = self._witness_var(lambda: self.to_fr() - other.to_fr())
        current_engine().circuit.add_subtraction_gate(self._var, other._var, out)
        return Field.from_variable(out)

    def mul(self, other):
        other = _as_field(other)
        if self._folds(other):
            return Field(self.to_fr() * other.to_fr())
        if not self.is_constant() and not other.is_constant():
            out = self._witness_var(lambda: self.to_fr() * other.to_fr())
            current_engine().circuit.add_multiplication_gate(self._var, other._var, out)
            return Field.from_variable(out)
        var, const = (self, other) if other.is_constant() else (other, self)
        out = self._witness_var(lambda: var.to_fr() * const._value)
        current_engine().circuit.add_scale_gate(var._var, const._value, out)
        return Field.from_variable(out)

    def neg(self):
        return self.mul(FR(0) - FR(1))

    def square(self):
        return self.mul(self)

    __add__ = add
    __sub__ = sub
    __mul__ = mul
    __neg__ = neg

    def __radd__(self, other):
        return _as_field(other).add(self)

    def __rsub__(self, other):
        return _as_field(other).sub(self)

    def __rmul__(self, other):
        return _as_field(other).mul(self)

    # ── 단언(assertion) ──

    def assert_equals(self, other, message=None):
        """self == other 제약을 건다.

        Raises:
            ConstraintViolationError: 값을 알 수 있고 서로 다를 때
        """
        other = _as_field(other)
        if self._folds(other):
            if self.to_fr() != other.to_fr():
                raise ConstraintViolationError(
                    message or f"assert_equals: {self.to_bigint()} != {other.to_bigint()}"
                )
            return
        circuit = current_engine().circuit
        if not self.is_constant() and not other.is_constant():
            circuit.add_equality_gate(self._var, other._var)
        else:
            var, const = (self, other) if other.is_constant() else (other, self)
            circuit.add_constant_equality_gate(var._var, const._value)

    def assert_boolean(self, message=None):
        """self ∈ {0, 1} 제약을 건다."""
        if self._folds(self):
            if self.to_fr() not in (FR(0), FR(1)):
                raise ConstraintViolationError(
                    message or f"assert_boolean: {self.to_bigint()}은 0 또는 1이 아닙니다"
                )
            return
        current_engine().circuit.add_boolean_gate(self._var)

    def __repr__(self):
        if self.is_constant():
            return f"Field({int(self._value)})"
        return f"Field(var={self._var})"


def _as_field(value):
    return value if isinstance(value, Field) else Field(value)


class Bool:
    """Field 하나로 표현되는 불리언 값."""

    __slots__ = ("value",)

    def __init__(self, value):
        if isinstance(value, bool):
            value = Field(1 if value else 0)
        self.value = _as_field(value)

    def to_field(self):
        return self.value

    def to_boolean(self):
        return self.value.to_bigint() == 1

    def not_(self):
        return Bool(Field(1).sub(self.value))

    def assert_equals(self, other, message=None):
        other = other if isinstance(other, Bool) else Bool(other)
        self.value.assert_equals(other.value, message)

    def __repr__(self):
        if self.value.is_constant():
            return f"Bool({self.to_boolean()})"
        return f"Bool(var={self.value.var})"


# ─────────────────────────────────────────────────────────────────────
# 디스크립터
# ─────────────────────────────────────────────────────────────────────

class FieldType(ProvableType):
    """Field의 디스크립터: 크기 1, 보조 데이터 없음, check 없음."""

    has_json = True
    has_input = True

    @property
    def type_name(self):
        return "Field"

    def size_in_fields(self):
        return 1

    def to_fields(self, value):
        return [_as_field(value)]

    def to_auxiliary(self, value=None):
        return []

    def from_fields(self, fields, aux=None):
        return fields[0]

    def check(self, value):
        pass

    def to_json(self, value):
        return str(_as_field(value).to_bigint())

    def from_json(self, json):
        return Field(int(json))

    def to_input(self, value):
        return HashInput(fields=[_as_field(value)])


class BoolType(ProvableType):
    """Bool의 디스크립터: 크기 1, check는 불리언 제약."""

    has_json = True
    has_input = True

    @property
    def type_name(self):
        return "Bool"

    def size_in_fields(self):
        return 1

    def to_fields(self, value):
        return [_as_bool(value).value]

    def to_auxiliary(self, value=None):
        return []

    def from_fields(self, fields, aux=None):
        return Bool(fields[0])

    def check(self, value):
        _as_bool(value).value.assert_boolean()

    def to_json(self, value):
        return _as_bool(value).to_boolean()

    def from_json(self, json):
        if not isinstance(json, bool):
            raise TypeError(f"Bool.from_json: bool이 필요합니다 ({json!r})")
        return Bool(json)

    def to_input(self, value):
        return HashInput(packed=[(_as_bool(value).value, 1)])


def _as_bool(value):
    return value if isinstance(value, Bool) else Bool(value)


Field.provable = FieldType()
Bool.provable = BoolType()
