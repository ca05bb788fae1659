"""
회로 백엔드의 유한체(Finite Field)
====================================

회로 변수, 게이트 계수, 증인(witness) 값이 모두 이 유한체의 원소이다.

**유한체 FR**:
  bn128 타원곡선의 스칼라 필드 (scalar field).
  - 위수(order) p ≈ 2^254, 소수체(prime field)
  - 한 원소는 32바이트로 직렬화된다

**계수 바이트 인코딩**:
  제약 시스템(constraint system)을 JSON으로 내보낼 때 게이트 계수는
  부호 없는 정수의 바이트 배열(기본: 리틀엔디안 32바이트)로 표현된다.
  분석기(analyzer)는 이 배열을 다시 10진수 문자열로 복원한다.

사용 예시:
    >>> from zkp.provable.field import FR, fr_to_bytes, bytes_to_int
    >>> x = FR(3) * FR(7)        # FR(21)
    >>> bytes_to_int(fr_to_bytes(x))
    21
"""

import secrets

from py_ecc.fields import bn128_FQ as FQ
from py_ecc import bn128


# ─────────────────────────────────────────────────────────────────────
# 유한체(Finite Field) FR
# ─────────────────────────────────────────────────────────────────────

class FR(FQ):
    """bn128 스칼라 필드 위의 유한체 원소.

    py_ecc의 FQ 클래스를 상속하여 +, -, *, /, ** 등의 필드 연산을 제공한다.

    예시:
        >>> x = FR(3)
        >>> x * x          # FR(9)
        >>> FR(0) - FR(1)  # FR(p - 1)
    """
    field_modulus = bn128.curve_order


# 곡선 위수 (필드 크기)
CURVE_ORDER = bn128.curve_order

# 게이트 계수 하나의 직렬화 길이와 기본 바이트 순서
COEFF_BYTES = 32
COEFF_BYTEORDER = "little"


def to_fr(value):
    """정수 또는 FR 값을 FR로 정규화한다."""
    if isinstance(value, FR):
        return value
    return FR(int(value))


def random_fr():
    """균등 분포의 임의 FR 원소를 반환한다.

    암호학적 난수(secrets)를 사용한다. 블라인딩 값이나
    테스트용 비결정적 증인의 원천이 된다.
    """
    return FR(secrets.randbelow(CURVE_ORDER))


# ─────────────────────────────────────────────────────────────────────
# 계수 바이트 인코딩
# ─────────────────────────────────────────────────────────────────────

def fr_to_bytes(value, byteorder=COEFF_BYTEORDER):
    """FR 원소를 COEFF_BYTES 길이의 부호 없는 바이트 리스트로 직렬화한다.

    Args:
        value: FR 원소 또는 정수
        byteorder: "little" 또는 "big"

    Returns:
        list[int]: 0~255 범위 정수 리스트 (JSON 직렬화 가능)
    """
    return list((int(value) % CURVE_ORDER).to_bytes(COEFF_BYTES, byteorder))


def bytes_to_int(data, byteorder=COEFF_BYTEORDER):
    """부호 없는 바이트 배열을 정수로 복원한다.

    Args:
        data: bytes 또는 0~255 정수의 리스트
        byteorder: "little" 또는 "big"

    Returns:
        int: 복원된 부호 없는 정수

    Raises:
        ValueError: 바이트 범위를 벗어난 원소가 있을 때
    """
    return int.from_bytes(bytes(data), byteorder)
