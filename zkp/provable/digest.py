"""
제약 시스템 다이제스트 (Constraint System Digest)
==================================================

게이트 시퀀스 전체를 SHA-256 트랜스크립트로 해싱한다.

같은 회로 코드를 두 번 분석하면 같은 게이트가 같은 순서로 기록되므로
다이제스트도 같아야 한다. 게이트 하나라도 계수·배선·유형이 바뀌면
다이제스트가 달라진다.

**누적 규칙**:
  - 모든 데이터는 레이블(label)과 함께 추가된다 (도메인 분리)
  - 정수는 32바이트 빅엔디안으로 직렬화된다

사용 예시:
    >>> d = ConstraintDigest()
    >>> d.append_gate("Generic", [(0, 0), (0, 1), (0, 2)], [FR(1), FR(0)])
    >>> d.hexdigest()
"""

import hashlib

from zkp.provable.field import CURVE_ORDER


class ConstraintDigest:
    """SHA-256 기반 게이트 시퀀스 해셔.

    속성:
        state: 현재까지 누적된 해시 입력 바이트열
    """

    def __init__(self, label=b"zkp.provable.constraint-system"):
        self.state = bytearray()
        self.state.extend(label)

    def append_int(self, label, value):
        self.state.extend(label)
        self.state.extend((int(value) % CURVE_ORDER).to_bytes(32, "big"))

    def append_gate(self, typ, wires, coeffs):
        """게이트 하나를 트랜스크립트에 추가한다.

        Args:
            typ: 게이트 유형 문자열 (예: "Generic")
            wires: (row, col) 튜플 리스트
            coeffs: FR 원소 또는 정수 리스트
        """
        self.state.extend(b"gate")
        encoded = typ.encode()
        self.state.extend(len(encoded).to_bytes(4, "big"))
        self.state.extend(encoded)
        for row, col in wires:
            self.append_int(b"row", row)
            self.append_int(b"col", col)
        for coeff in coeffs:
            self.append_int(b"coeff", coeff)

    def hexdigest(self):
        return hashlib.sha256(bytes(self.state)).hexdigest()
