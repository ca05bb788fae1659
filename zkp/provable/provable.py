"""
증인 엔진과 회로 실행 도구 (Witness Engine)
=============================================

애플리케이션 회로 코드가 직접 쓰는 연산들.

**witness(type, compute)**:
  회로 밖에서 계산한 값을 회로 변수로 들여온다.

  1. 검사 실행 밖이거나 이미 증인 블록 안이면:
     compute()를 그냥 호출하고 to_fields/to_auxiliary/from_fields로
     한 번 왕복시켜(clone) 반환한다. (중첩 증인의 무한 재귀 방지)
  2. 아니면 in_witness_block 프레임에서 엔진의 exists()를 호출한다.
     증명자 콜백이 compute()를 실행하고 to_fields 결과를 돌려주면
     엔진이 각 필드를 새 변수에 묶는다.
  3. 보조 데이터는 증명자 값으로부터 다시 계산한다 (필드 커밋에 포함되지 않음).
     분석 모드라 값이 없으면 to_auxiliary(None)으로 형태만 만든다.
  4. type.check(value)로 새 변수에 타입 제약을 건다.
  5. 값을 반환한다.

  주의: 증명에 들어가는 것은 값뿐이고, 값이 어떻게 계산됐는지는 들어가지 않는다.
  witness 직후에 필요한 단언(assertion)을 반드시 걸어야 한다.

**실행 모드 진입**:
  | 함수               | 프레임 플래그                          | 엔진 모드   |
  |--------------------|----------------------------------------|-------------|
  | run_and_check      | in_checked_computation                 | "check"     |
  | run_unchecked      | in_checked_computation                 | "unchecked" |
  | constraint_system  | in_checked_computation, in_analyze     | "analyze"   |

사용 예시 (역원을 증인으로 들여오고 검증):
    >>> def circuit():
    ...     x = witness(Field.provable, lambda: Field(7))
    ...     inv = witness(Field.provable, lambda: Field(FR(1) / x.to_fr()))
    ...     (inv * x).assert_equals(1)
    >>> run_and_check(circuit)
"""

import logging

from zkp.provable import circuit
from zkp.provable.context import (
    in_checked_computation,
    in_prover,
    snark_context,
    snark_scope,
)
from zkp.provable.element import Field
from zkp.provable.errors import ShapeMismatchError
from zkp.provable.field import COEFF_BYTEORDER, bytes_to_int

logger = logging.getLogger(__name__)

__all__ = [
    "witness",
    "clone",
    "as_prover",
    "run_and_check",
    "run_unchecked",
    "constraint_system",
    "gates_from_json",
    "in_prover",
    "in_checked_computation",
    "ConstraintSystemSummary",
]


def witness(provable_type, compute):
    """compute()의 결과를 provable_type의 회로 값으로 들여온다.

    Args:
        provable_type: ProvableType 디스크립터
        compute: 증명자 측에서 값을 계산하는 무인자 콜백

    Returns:
        검사 실행 안: 변수로 이루어진 값 (check 통과)
        그 밖: compute() 결과를 clone한 값

    Raises:
        ShapeMismatchError: to_fields 결과 개수가 size_in_fields와 다를 때
        ConstraintViolationError: run_and_check 중 check가 실패할 때
    """
    ctx = snark_context.get()
    if not ctx.in_checked_computation or ctx.in_witness_block:
        return clone(provable_type, compute())

    prover_value = []

    def prover_fields():
        value = compute()
        prover_value.append(value)
        return [Field(f).to_fr() for f in provable_type.to_fields(value)]

    with snark_scope(in_witness_block=True):
        variables = circuit.exists(provable_type.size_in_fields(), prover_fields)

    fields = [Field.from_variable(var) for var in variables]
    aux = provable_type.to_auxiliary(prover_value[0] if prover_value else None)
    value = provable_type.from_fields(fields, aux)

    provable_type.check(value)
    return value


def clone(provable_type, value):
    """값을 필드·보조 데이터로 한 번 왕복시켜 정규화한다.

    Raises:
        ShapeMismatchError: to_fields 결과 개수가 size_in_fields와 다를 때
    """
    fields = provable_type.to_fields(value)
    if len(fields) != provable_type.size_in_fields():
        raise ShapeMismatchError(provable_type.size_in_fields(), len(fields), "clone")
    aux = provable_type.to_auxiliary(value)
    return provable_type.from_fields(fields, aux)


def as_prover(f):
    """f를 증명자 코드로 실행한다.

    검사 실행 안에서는 엔진에 위임한다: 증인 생성 중이면 in_prover 프레임에서
    실행하고, 제약 시스템 분석 중이면 건너뛴다. 검사 실행 밖에서는 f()를 바로 호출한다.
    """
    if in_checked_computation():
        return circuit.as_prover(f)
    return f()


def run_and_check(f):
    """증명 없이 f를 실행하되, 모든 게이트가 만족되는지 검사한다."""
    with snark_scope(in_checked_computation=True):
        return circuit.run_and_check(f)


def run_unchecked(f):
    """증명 없이 f를 실행하고, 게이트 만족 여부는 검사하지 않는다."""
    with snark_scope(in_checked_computation=True):
        return circuit.run_unchecked(f)


class ConstraintSystemSummary:
    """constraint_system()의 결과.

    속성:
        rows: 게이트(행) 수
        digest: 게이트 시퀀스의 hex 다이제스트
        result: f의 반환값
        gates: {"type", "wires", "coeffs"} 딕셔너리 리스트 (계수는 10진수 문자열)
        public_input_size: 공개 입력 수
    """

    def __init__(self, rows, digest, result, gates, public_input_size):
        self.rows = rows
        self.digest = digest
        self.result = result
        self.gates = gates
        self.public_input_size = public_input_size

    def gate_types(self):
        return [gate["type"] for gate in self.gates]

    def __repr__(self):
        return f"ConstraintSystemSummary(rows={self.rows}, digest={self.digest[:16]}...)"


def constraint_system(f):
    """f를 기호적으로 실행하여 생성되는 제약 시스템 정보를 반환한다.

    증인 호출은 값 없는 변수를 만들고, as_prover 블록은 실행되지 않는다.
    내부 분석과 테스트 전용이며 실제 증명을 만드는 데 쓰지 않는다.

    Returns:
        ConstraintSystemSummary
    """
    result = []

    def body():
        result.append(f())

    with snark_scope(in_analyze=True, in_checked_computation=True):
        cs = circuit.analyze(body)

    decoded = gates_from_json(cs["json"])
    logger.debug("constraint system: rows=%d digest=%s", cs["rows"], cs["digest"])
    return ConstraintSystemSummary(
        rows=cs["rows"],
        digest=cs["digest"],
        result=result[0],
        gates=decoded["gates"],
        public_input_size=decoded["public_input_size"],
    )


def gates_from_json(cs, byteorder=COEFF_BYTEORDER):
    """백엔드 JSON 제약 시스템을 디코딩한다.

    각 계수의 부호 없는 바이트 배열을 정수로 복원하여 10진수 문자열로 바꾼다.

    Args:
        cs: {"gates": [{"typ", "wires", "coeffs"}], "public_input_size"}
        byteorder: 계수 바이트 순서 ("little" 또는 "big")

    Returns:
        dict: {"public_input_size": int, "gates": [{"type", "wires", "coeffs"}]}
    """
    gates = []
    for gate in cs["gates"]:
        coeffs = [str(bytes_to_int(c, byteorder)) for c in gate["coeffs"]]
        gates.append({"type": gate["typ"], "wires": gate["wires"], "coeffs": coeffs})
    return {"public_input_size": cs["public_input_size"], "gates": gates}
