"""
실행 컨텍스트 스택 (Execution Context Stack)
=============================================

회로 코드는 같은 함수가 세 가지 모드에서 실행된다:

  | 모드              | in_checked_computation | in_analyze | 증인 값 |
  |-------------------|------------------------|------------|---------|
  | 일반 평가         | False                  | False      | 상수    |
  | 검사 실행         | True                   | False      | 있음    |
  | 제약 시스템 분석  | True                   | True       | 없음    |

모드는 프레임(frame)의 스택으로 관리된다. 새 프레임은 현재 프레임 위에
덮어쓸 플래그만 지정하여(overlay) 들어가고, 들어간 순서의 역순(LIFO)으로
정확히 한 번 빠져나와야 한다.

**저장 위치**:
  스택은 contextvars.ContextVar에 불변 튜플로 보관된다.
  asyncio 태스크나 스레드마다 독립된 스택을 갖게 되며,
  모드 판정 함수는 항상 "현재" 프레임만 읽는다.

사용 예시:
    >>> with snark_scope(in_checked_computation=True):
    ...     in_checked_computation()
    True
    >>> in_checked_computation()
    False
"""

import contextvars
import itertools
from contextlib import contextmanager

from zkp.provable.errors import ContextImbalanceError


_frame_ids = itertools.count(1)


class Context:
    """중첩 가능한 컨텍스트 값의 푸시다운 스택.

    속성:
        name: 디버깅용 이름
        default: 스택이 비었을 때 get()이 돌려줄 값 (None이면 없음)
    """

    def __init__(self, name, default=None):
        self.name = name
        self.default = default
        self._stack = contextvars.ContextVar(f"zkp.provable.{name}", default=())

    def has(self):
        return bool(self._stack.get()) or self.default is not None

    def get(self):
        """현재(가장 최근에 들어간) 값을 반환한다.

        Raises:
            LookupError: 스택이 비었고 기본값도 없을 때
        """
        stack = self._stack.get()
        if stack:
            return stack[-1][1]
        if self.default is not None:
            return self.default
        raise LookupError(f"컨텍스트 '{self.name}'가 활성화되어 있지 않습니다")

    def depth(self):
        return len(self._stack.get())

    def enter(self, value):
        """새 프레임을 스택에 넣고 그 식별자를 반환한다."""
        frame_id = next(_frame_ids)
        self._stack.set(self._stack.get() + ((frame_id, value),))
        return frame_id

    def leave(self, frame_id):
        """가장 최근 프레임을 꺼낸다.

        Args:
            frame_id: enter()가 반환한 식별자

        Returns:
            꺼낸 프레임의 값

        Raises:
            ContextImbalanceError: frame_id가 스택 꼭대기가 아닐 때
        """
        stack = self._stack.get()
        if not stack or stack[-1][0] != frame_id:
            top = stack[-1][0] if stack else None
            raise ContextImbalanceError(
                f"컨텍스트 '{self.name}': 프레임 {frame_id}를 해제하려 했지만 "
                f"현재 꼭대기는 {top}입니다"
            )
        self._stack.set(stack[:-1])
        return stack[-1][1]

    @contextmanager
    def scope(self, value):
        """value를 현재 프레임으로 두고 블록을 실행한다. 예외가 나도 해제된다."""
        frame_id = self.enter(value)
        try:
            yield value
        finally:
            self.leave(frame_id)

    def run_with(self, value, f):
        """f()를 value 프레임 아래에서 실행하고 (value, 결과)를 반환한다."""
        with self.scope(value):
            result = f()
        return value, result


# ─────────────────────────────────────────────────────────────────────
# 회로 실행 모드 프레임
# ─────────────────────────────────────────────────────────────────────

class SnarkFrame:
    """실행 모드 플래그 묶음. 불변이며 overlay()로 새 프레임을 만든다."""

    __slots__ = (
        "in_checked_computation",
        "in_prover",
        "in_analyze",
        "in_witness_block",
    )

    def __init__(self, in_checked_computation=False, in_prover=False,
                 in_analyze=False, in_witness_block=False):
        object.__setattr__(self, "in_checked_computation", in_checked_computation)
        object.__setattr__(self, "in_prover", in_prover)
        object.__setattr__(self, "in_analyze", in_analyze)
        object.__setattr__(self, "in_witness_block", in_witness_block)

    def __setattr__(self, name, value):
        raise AttributeError("SnarkFrame은 불변입니다. overlay()를 사용하세요")

    def overlay(self, **overrides):
        """현재 플래그 위에 overrides를 덮어쓴 새 프레임을 반환한다."""
        flags = self.as_dict()
        for key in overrides:
            if key not in flags:
                raise TypeError(f"알 수 없는 프레임 플래그: {key}")
        flags.update(overrides)
        return SnarkFrame(**flags)

    def as_dict(self):
        return {name: getattr(self, name) for name in self.__slots__}

    def __eq__(self, other):
        if not isinstance(other, SnarkFrame):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __hash__(self):
        return hash(tuple(self.as_dict().items()))

    def __repr__(self):
        on = [name for name, flag in self.as_dict().items() if flag]
        return f"SnarkFrame({', '.join(on)})"


snark_context = Context("snark", default=SnarkFrame())


def snark_scope(**overrides):
    """현재 프레임에 overrides를 덮어쓴 프레임으로 들어가는 컨텍스트 매니저."""
    return snark_context.scope(snark_context.get().overlay(**overrides))


def in_checked_computation():
    """검사 실행 또는 제약 시스템 분석 중인지 여부."""
    return snark_context.get().in_checked_computation


def in_prover():
    """증명자(prover) 전용 블록 안에서 실행 중인지 여부."""
    return snark_context.get().in_prover


def in_analyze():
    return snark_context.get().in_analyze
