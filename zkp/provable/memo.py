"""
증인 메모이제이션 (Witness Memoization)
=========================================

난수, 외부 서명처럼 본질적으로 비결정적인 증인이 있다. 그런데 하나의 논리적
연산은 여러 번 평가될 수 있다 (공개 형태를 알아내는 패스, 증명을 만드는 패스).
두 패스가 같은 증인 값을 만들지 않으면 증명이 공개된 값과 맞지 않는다.

**프로토콜**:
  메모이제이션 레코드는 바깥의 재사용 가능한 연산 하나에 묶인다.
  memoize_witness 호출마다:
    - 커서 위치의 슬롯이 차 있으면 저장된 (fields, aux)를 그대로 쓴다
    - 비어 있으면 compute()를 호출하고, 모든 필드를 상수로 바꿔
      (이전 패스의 변수에 의존하지 않도록) 저장한다
    - 어느 쪽이든 커서를 한 칸 전진한다

  슬롯은 "호출 순서"로만 식별된다. 두 패스는 반드시 같은 순서로
  증인을 호출해야 하며, 순서가 다르면 캐시가 조용히 어긋난다.

**블라인딩 값**:
  get_blinding_value()는 레코드마다 처음 요청될 때 한 번만 뽑는 임의 필드 값이다.

사용 예시:
    >>> record = MemoizationRecord()
    >>> with memoization_scope(record):
    ...     first = run_and_check(build)        # 1차 패스: compute 호출
    >>> with memoization_scope(record.restart()):
    ...     second = run_and_check(build)       # 2차 패스: 캐시 재생
"""

import logging
from contextlib import contextmanager

from zkp.provable.context import Context
from zkp.provable.element import Field
from zkp.provable.provable import witness

logger = logging.getLogger(__name__)


class MemoizationRecord:
    """한 바깥 연산에 묶인 증인 캐시.

    속성:
        memoized: (fields, aux) 튜플의 순서 있는 리스트
        current_index: 다음에 읽거나 쓸 슬롯 위치
        blinding_value: 지연 생성되는 블라인딩 Field (처음엔 None)
    """

    def __init__(self, shared=None):
        # restart()로 만든 레코드끼리 공유하는 슬롯과 블라인딩 값
        self._shared = shared if shared is not None else {
            "memoized": [],
            "blinding_value": None,
        }
        self.current_index = 0

    @property
    def memoized(self):
        return self._shared["memoized"]

    @property
    def blinding_value(self):
        return self._shared["blinding_value"]

    @blinding_value.setter
    def blinding_value(self, value):
        self._shared["blinding_value"] = value

    def restart(self):
        """캐시와 블라인딩 값을 공유하고 커서만 0인 새 레코드를 반환한다."""
        return MemoizationRecord(self._shared)

    def __len__(self):
        return len(self.memoized)


memoization_context = Context("memoization")


@contextmanager
def memoization_scope(record=None):
    """record(없으면 새 레코드) 아래에서 블록을 실행한다."""
    if record is None:
        record = MemoizationRecord()
    with memoization_context.scope(record):
        yield record


def memoize_witness(provable_type, compute):
    """witness()와 같지만, 활성 레코드가 있으면 결과를 기록하고 재생한다."""

    def memoized_compute():
        if not memoization_context.has():
            return compute()
        record = memoization_context.get()
        index = record.current_index
        if index < len(record.memoized):
            fields, aux = record.memoized[index]
            logger.debug("memoized witness %d: replay", index)
        else:
            value = compute()
            fields = [Field(f).to_constant() for f in provable_type.to_fields(value)]
            aux = provable_type.to_auxiliary(value)
            record.memoized.append((fields, aux))
            logger.debug("memoized witness %d: stored", index)
        record.current_index += 1
        return provable_type.from_fields(fields, aux)

    return witness(provable_type, memoized_compute)


def get_blinding_value():
    """레코드의 블라인딩 값. 레코드가 없으면 매번 새 임의 값을 반환한다."""
    if not memoization_context.has():
        return Field.random()
    record = memoization_context.get()
    if record.blinding_value is None:
        record.blinding_value = Field.random()
    return record.blinding_value
