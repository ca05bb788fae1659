"""
참조 회로 엔진 (Reference Circuit Engine)
===========================================

증명 가능 값 계층이 호출하는 백엔드 기본 연산을 구현한다.
실제 증명은 만들지 않고, 게이트를 기록하고 증인(witness)으로 검사만 한다.

**게이트 구조** (PLONK 일반 게이트):
  각 게이트는 3개의 배선(wire) a, b, c와 5개의 셀렉터(selector)로 구성:

    q_L·a + q_R·b + q_O·c + q_M·(a·b) + q_C = 0

  | 형태        | q_L | q_R | q_O | q_M | q_C | 의미         |
  |-------------|-----|-----|-----|-----|-----|--------------|
  | 곱셈        |  0  |  0  | -1  |  1  |  0  | a·b = c      |
  | 덧셈        |  1  |  1  | -1  |  0  |  0  | a + b = c    |
  | 상수덧셈    |  1  |  0  | -1  |  0  |  k  | a + k = c    |
  | 스케일      |  k  |  0  | -1  |  0  |  0  | k·a = c      |
  | 동치        |  1  | -1  |  0  |  0  |  0  | a = b        |
  | 상수동치    |  1  |  0  |  0  |  0  | -k  | a = k        |
  | 불리언      | -1  |  0  |  0  |  1  |  0  | a·a = a      |

**엔진 모드**:
  | 모드        | 증인 생성 | 게이트 검사 | 용도                    |
  |-------------|-----------|-------------|-------------------------|
  | "check"     | O         | O           | run_and_check           |
  | "unchecked" | O         | X           | run_unchecked           |
  | "analyze"   | X         | X           | 제약 시스템 분석        |

**배선(wire)**:
  같은 변수가 놓인 위치들을 순환(cycle)으로 연결한다. 각 위치의 배선은
  같은 변수를 담은 "다음" 위치를 가리키고, 마지막 위치는 첫 위치로 돌아간다.

사용 예시:
    >>> engine, result = run("check", lambda: ...)
    >>> engine.circuit.n   # 기록된 게이트 수
"""

import logging

from zkp.provable.context import Context, in_prover, snark_scope
from zkp.provable.digest import ConstraintDigest
from zkp.provable.errors import (
    ConstraintViolationError,
    ProvableError,
    ShapeMismatchError,
)
from zkp.provable.field import FR, COEFF_BYTEORDER, fr_to_bytes, to_fr

logger = logging.getLogger(__name__)

MODES = ("check", "unchecked", "analyze")

# 한 게이트의 배선 열 수 (a, b, c)
NUM_WIRES = 3


class Gate:
    """PLONK 일반 산술 게이트.

    게이트 방정식: q_L·a + q_R·b + q_O·c + q_M·(a·b) + q_C = 0
    """

    def __init__(self, q_l, q_r, q_o, q_m, q_c, typ="Generic"):
        self.typ = typ
        self.q_l = to_fr(q_l)
        self.q_r = to_fr(q_r)
        self.q_o = to_fr(q_o)
        self.q_m = to_fr(q_m)
        self.q_c = to_fr(q_c)

    @property
    def coeffs(self):
        return [self.q_l, self.q_r, self.q_o, self.q_m, self.q_c]

    def check(self, a, b, c):
        """게이트 제약이 만족되는지 확인한다.

        Args:
            a, b, c: 배선 값 (FR 원소 또는 정수)

        Returns:
            bool: 제약 만족 여부
        """
        a, b, c = to_fr(a), to_fr(b), to_fr(c)
        result = (
            self.q_l * a
            + self.q_r * b
            + self.q_o * c
            + self.q_m * (a * b)
            + self.q_c
        )
        return result == FR(0)

    def __repr__(self):
        coeffs = ", ".join(str(int(c)) for c in self.coeffs)
        return f"Gate({self.typ}: {coeffs})"


MINUS_ONE = FR(0) - FR(1)


class Circuit:
    """기록 중인 제약 시스템.

    속성:
        gates: Gate 리스트
        rows: 게이트별 (a, b, c) 배선에 놓인 변수 인덱스 (없으면 None)
        num_variables: 할당된 변수 수
        num_public_inputs: 공개 입력 수
        on_gate: 게이트가 추가될 때마다 행 인덱스로 호출되는 콜백 (선택)
    """

    def __init__(self, on_gate=None):
        self.gates = []
        self.rows = []
        self.num_variables = 0
        self.num_public_inputs = 0
        self.on_gate = on_gate

    @property
    def n(self):
        """게이트 수."""
        return len(self.gates)

    def allocate(self, size):
        """새 변수 size개를 할당하고 그 인덱스 리스트를 반환한다."""
        start = self.num_variables
        self.num_variables += size
        return list(range(start, start + size))

    def add_gate(self, gate, left=None, right=None, out=None):
        """게이트를 추가한다.

        Args:
            gate: Gate 객체
            left, right, out: a, b, c 배선에 놓일 변수 인덱스 (없으면 None)

        Returns:
            int: 추가된 게이트의 행 인덱스
        """
        self.gates.append(gate)
        self.rows.append((left, right, out))
        row = len(self.gates) - 1
        if self.on_gate is not None:
            self.on_gate(row)
        return row

    def add_generic_gate(self, left, right, out, q_l, q_r, q_o, q_m, q_c):
        return self.add_gate(Gate(q_l, q_r, q_o, q_m, q_c), left, right, out)

    def add_multiplication_gate(self, left, right, out):
        """곱셈 게이트: a · b = c."""
        return self.add_generic_gate(left, right, out, 0, 0, MINUS_ONE, 1, 0)

    def add_addition_gate(self, left, right, out):
        """덧셈 게이트: a + b = c."""
        return self.add_generic_gate(left, right, out, 1, 1, MINUS_ONE, 0, 0)

    def add_subtraction_gate(self, left, right, out):
        """뺄셈 게이트: a - b = c."""
        return self.add_generic_gate(left, right, out, 1, MINUS_ONE, MINUS_ONE, 0, 0)

    def add_constant_gate(self, left, constant, out):
        """상수 덧셈 게이트: a + constant = c."""
        return self.add_generic_gate(left, None, out, 1, 0, MINUS_ONE, 0, constant)

    def add_scale_gate(self, left, scalar, out):
        """스케일 게이트: scalar · a = c."""
        return self.add_generic_gate(left, None, out, scalar, 0, MINUS_ONE, 0, 0)

    def add_equality_gate(self, left, right):
        """동치 게이트: a = b."""
        return self.add_generic_gate(left, right, None, 1, MINUS_ONE, 0, 0, 0)

    def add_constant_equality_gate(self, left, constant):
        """상수 동치 게이트: a = constant."""
        return self.add_generic_gate(left, None, None, 1, 0, 0, 0, FR(0) - to_fr(constant))

    def add_boolean_gate(self, var):
        """불리언 게이트: a · a - a = 0 (a, b 배선에 같은 변수)."""
        return self.add_generic_gate(var, var, None, MINUS_ONE, 0, 0, 1, 0)

    def build_wires(self):
        """배선 순열을 구성한다.

        같은 변수를 담은 위치 (row, col)들을 등장 순서대로 순환으로 묶는다.
        변수가 없는 위치는 자기 자신을 가리킨다.

        Returns:
            list[list[tuple]]: wires[row][col] = 연결된 다음 (row, col)
        """
        wires = [[(row, col) for col in range(NUM_WIRES)] for row in range(self.n)]
        positions = {}
        for row, variables in enumerate(self.rows):
            for col, var in enumerate(variables):
                if var is not None:
                    positions.setdefault(var, []).append((row, col))

        for cycle in positions.values():
            for i, (row, col) in enumerate(cycle):
                wires[row][col] = cycle[(i + 1) % len(cycle)]
        return wires

    def digest(self):
        """게이트 시퀀스의 SHA-256 다이제스트 (hex)."""
        d = ConstraintDigest()
        for gate, wires in zip(self.gates, self.build_wires()):
            d.append_gate(gate.typ, wires, gate.coeffs)
        return d.hexdigest()

    def to_json(self, byteorder=COEFF_BYTEORDER):
        """백엔드 JSON 형식으로 내보낸다. 계수는 부호 없는 바이트 배열이다."""
        gates = []
        for gate, wires in zip(self.gates, self.build_wires()):
            gates.append({
                "typ": gate.typ,
                "wires": [{"row": row, "col": col} for row, col in wires],
                "coeffs": [fr_to_bytes(c, byteorder) for c in gate.coeffs],
            })
        return {"gates": gates, "public_input_size": self.num_public_inputs}


class CircuitEngine:
    """한 번의 회로 실행 상태 (게이트 + 증인 값).

    속성:
        mode: "check", "unchecked", "analyze" 중 하나
        circuit: 기록 중인 Circuit
        values: 변수 인덱스 → FR (분석 모드에서는 None)
    """

    def __init__(self, mode="check"):
        if mode not in MODES:
            raise ValueError(f"알 수 없는 엔진 모드: {mode}")
        self.mode = mode
        on_gate = self._check_row if mode == "check" else None
        self.circuit = Circuit(on_gate=on_gate)
        self.values = None if mode == "analyze" else {}

    @property
    def has_witness(self):
        return self.values is not None

    def exists(self, size, compute):
        """변수 size개를 할당한다.

        증인 생성 모드에서는 compute()를 증명자 프레임에서 실행하여
        각 변수에 값을 묶는다. 분석 모드에서는 compute를 호출하지 않는다.

        Args:
            size: 할당할 변수 수
            compute: FR(또는 정수) 리스트를 반환하는 콜백

        Returns:
            list[int]: 새 변수 인덱스

        Raises:
            ShapeMismatchError: compute가 size와 다른 개수를 반환했을 때
        """
        variables = self.circuit.allocate(size)
        if not self.has_witness:
            return variables

        with snark_scope(in_prover=True):
            values = list(compute())
        if len(values) != size:
            raise ShapeMismatchError(size, len(values), "exists")
        for var, value in zip(variables, values):
            self.values[var] = to_fr(value)
        return variables

    def value_of(self, var):
        """변수의 증인 값을 읽는다. 증명자 블록 안에서만 허용된다.

        Raises:
            ProvableError: 분석 모드이거나 증명자 블록 밖일 때
        """
        if not self.has_witness:
            raise ProvableError(
                f"변수 {var}의 값은 증인 생성 중에만 읽을 수 있습니다 (모드: {self.mode})"
            )
        if not in_prover():
            raise ProvableError(
                f"변수 {var}의 값은 증명자 블록(as_prover, witness) 안에서만 읽을 수 있습니다"
            )
        return self.values[var]

    def _check_row(self, row):
        gate = self.circuit.gates[row]
        a, b, c = (
            FR(0) if var is None else self.values[var]
            for var in self.circuit.rows[row]
        )
        if not gate.check(a, b, c):
            raise ConstraintViolationError(
                f"게이트 {row} ({gate!r}) 제약 위반: "
                f"a={int(a)}, b={int(b)}, c={int(c)}"
            )


# ─────────────────────────────────────────────────────────────────────
# 백엔드 기본 연산 (증명 가능 값 계층이 호출)
# ─────────────────────────────────────────────────────────────────────

circuit_context = Context("circuit")


def current_engine():
    """활성화된 CircuitEngine을 반환한다.

    Raises:
        LookupError: 회로 실행 밖에서 호출했을 때
    """
    return circuit_context.get()


def exists(size, compute):
    return current_engine().exists(size, compute)


def as_prover(f):
    """증인 생성 중이면 f를 증명자 프레임에서 실행하고, 분석 중이면 건너뛴다."""
    if not current_engine().has_witness:
        return None
    with snark_scope(in_prover=True):
        return f()


def run(mode, f):
    """새 엔진에서 f()를 실행한다.

    Returns:
        tuple: (engine, f의 반환값)
    """
    engine = CircuitEngine(mode)
    logger.debug("circuit run start: mode=%s", mode)
    with circuit_context.scope(engine):
        result = f()
    logger.debug(
        "circuit run done: mode=%s rows=%d variables=%d",
        mode, engine.circuit.n, engine.circuit.num_variables,
    )
    return engine, result


def run_and_check(f):
    return run("check", f)[1]


def run_unchecked(f):
    return run("unchecked", f)[1]


def analyze(f):
    """f를 기호적으로 실행하여 게이트 정보를 추출한다.

    Returns:
        dict: {"rows": 게이트 수, "digest": hex 문자열, "json": to_json() 결과}
    """
    engine, _ = run("analyze", f)
    circuit = engine.circuit
    return {
        "rows": circuit.n,
        "digest": circuit.digest(),
        "json": circuit.to_json(),
    }
