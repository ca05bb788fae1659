"""
증명 가능 값 데모: 증인, 배열, 메모이제이션, 제약 시스템
==========================================================

실행:
    python -m zkp.provable.example

흐름:
    1. 회로 밖에서 witness: 값이 그대로 돌아온다
    2. run_and_check: 역원을 증인으로 들여오고 x · x⁻¹ = 1 검사
    3. 5원소 배열 직렬화/복원
    4. 메모이제이션: 임의 증인이 두 패스에서 같은 값으로 재생됨
    5. constraint_system: 게이트 목록과 다이제스트
"""

from zkp.provable.array import array
from zkp.provable.element import Bool, Field
from zkp.provable.field import FR
from zkp.provable.memo import (
    MemoizationRecord,
    get_blinding_value,
    memoization_scope,
    memoize_witness,
)
from zkp.provable.provable import as_prover, constraint_system, run_and_check, witness


def inverse_circuit(x_value=7):
    """x와 그 역원을 증인으로 들여오고 x · x⁻¹ = 1을 강제한다."""
    x = witness(Field.provable, lambda: Field(x_value))
    x_inv = witness(Field.provable, lambda: Field(FR(1) / x.to_fr()))
    (x * x_inv).assert_equals(1)
    flag = witness(Bool.provable, lambda: Bool(True))
    return x, x_inv, flag


def random_triple():
    """매번 새 난수를 뽑는 증인 세 개."""
    return [memoize_witness(Field.provable, Field.random) for _ in range(3)]


def read_values(fields):
    """증명자 블록에서 필드 값들을 정수로 읽는다."""
    return as_prover(lambda: [int(f) for f in fields])


def main():
    print("=" * 60)
    print("  Provable Values Demo")
    print("=" * 60)

    # ── 1. 회로 밖 witness ──
    print("\n[1] 회로 밖 witness...")
    value = witness(Field.provable, lambda: Field(42))
    print(f"    결과: {value!r} (상수: {value.is_constant()})")

    # ── 2. 검사 실행 ──
    print("\n[2] run_and_check: x · x⁻¹ = 1...")
    x, x_inv = run_and_check(lambda: read_values(inverse_circuit()[:2]))
    print(f"    x = {x}, x⁻¹ = {x_inv}")
    print(f"    확인: {FR(x) * FR(x_inv) == FR(1)}")

    # ── 3. 배열 ──
    print("\n[3] 5원소 배열 직렬화...")
    vec5 = array(Field.provable, 5)
    fields = vec5.to_fields([1, 2, 3, 4, 5])
    restored = vec5.from_fields(fields, vec5.to_auxiliary())
    print(f"    size_in_fields = {vec5.size_in_fields()}")
    print(f"    복원: {[int(f) for f in restored]}")

    # ── 4. 메모이제이션 ──
    print("\n[4] 메모이제이션 (두 패스)...")
    record = MemoizationRecord()
    with memoization_scope(record):
        first = run_and_check(lambda: read_values(random_triple()))
        blinding = get_blinding_value()
    with memoization_scope(record.restart()):
        second = run_and_check(lambda: read_values(random_triple()))
        same_blinding = get_blinding_value() is blinding
    print(f"    패스 일치: {first == second}, 블라인딩 값 공유: {same_blinding}")

    # ── 5. 제약 시스템 ──
    print("\n[5] constraint_system...")
    cs = constraint_system(inverse_circuit)
    print(f"    행 수: {cs.rows}")
    print(f"    다이제스트: {cs.digest}")
    for i, gate in enumerate(cs.gates):
        print(f"      게이트 {i}: {gate['type']} coeffs={gate['coeffs']}")

    print("\n" + "=" * 60)
    ok = first == second and same_blinding and [int(f) for f in restored] == [1, 2, 3, 4, 5]
    print(f"  데모 완료: {'모든 확인 통과!' if ok else '일부 확인 실패'}")
    print("=" * 60)

    return ok


if __name__ == "__main__":
    main()
