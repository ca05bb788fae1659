"""
실행 컨텍스트 스택 테스트.

테스트 대상:
  - Context: enter/leave LIFO, scope, run_with, 기본값, 불균형 오류
  - SnarkFrame: overlay, 불변성
  - 모드 판정: 중첩 프레임의 병합, 종료 후 복원, 태스크별 격리
"""

import contextvars

import pytest

from zkp.provable.context import (
    Context,
    SnarkFrame,
    in_analyze,
    in_checked_computation,
    in_prover,
    snark_context,
    snark_scope,
)
from zkp.provable.errors import ContextImbalanceError, ProvableError


# ─────────────────────────────────────────────────────────────────────
# Context 테스트
# ─────────────────────────────────────────────────────────────────────

class TestContext:
    """Context 푸시다운 스택 테스트."""

    def test_empty_without_default(self):
        """기본값 없는 빈 컨텍스트: has()는 False, get()은 LookupError."""
        ctx = Context("test")
        assert ctx.has() is False
        with pytest.raises(LookupError):
            ctx.get()

    def test_default_value(self):
        ctx = Context("test", default="base")
        assert ctx.has() is True
        assert ctx.get() == "base"
        assert ctx.depth() == 0

    def test_enter_leave_lifo(self):
        """enter한 순서의 역순으로 leave하면 이전 값이 복원된다."""
        ctx = Context("test")
        outer = ctx.enter("outer")
        inner = ctx.enter("inner")
        assert ctx.get() == "inner"
        assert ctx.depth() == 2
        assert ctx.leave(inner) == "inner"
        assert ctx.get() == "outer"
        assert ctx.leave(outer) == "outer"
        assert ctx.has() is False

    def test_enter_returns_distinct_ids(self):
        ctx = Context("test")
        a = ctx.enter(1)
        b = ctx.enter(1)
        assert a != b
        ctx.leave(b)
        ctx.leave(a)

    def test_leave_out_of_order_raises(self):
        """꼭대기가 아닌 프레임을 leave하면 ContextImbalanceError."""
        ctx = Context("test")
        outer = ctx.enter("outer")
        inner = ctx.enter("inner")
        with pytest.raises(ContextImbalanceError):
            ctx.leave(outer)
        # 실패한 leave는 스택을 바꾸지 않는다
        assert ctx.get() == "inner"
        ctx.leave(inner)
        ctx.leave(outer)

    def test_leave_on_empty_raises(self):
        ctx = Context("test")
        with pytest.raises(ContextImbalanceError):
            ctx.leave(12345)

    def test_imbalance_is_provable_error(self):
        assert issubclass(ContextImbalanceError, ProvableError)

    def test_scope_restores_on_exception(self):
        """scope 블록에서 예외가 나도 프레임이 해제된다."""
        ctx = Context("test", default="base")
        with pytest.raises(KeyError):
            with ctx.scope("temp"):
                assert ctx.get() == "temp"
                raise KeyError("boom")
        assert ctx.get() == "base"
        assert ctx.depth() == 0

    def test_run_with(self):
        ctx = Context("test")
        value, result = ctx.run_with("frame", lambda: ctx.get() + "!")
        assert value == "frame"
        assert result == "frame!"
        assert ctx.has() is False


# ─────────────────────────────────────────────────────────────────────
# SnarkFrame 테스트
# ─────────────────────────────────────────────────────────────────────

class TestSnarkFrame:
    """실행 모드 프레임 테스트."""

    def test_default_all_false(self):
        frame = SnarkFrame()
        assert frame.as_dict() == {
            "in_checked_computation": False,
            "in_prover": False,
            "in_analyze": False,
            "in_witness_block": False,
        }

    def test_overlay_keeps_parent_flags(self):
        parent = SnarkFrame(in_checked_computation=True)
        child = parent.overlay(in_witness_block=True)
        assert child.in_checked_computation is True
        assert child.in_witness_block is True
        # 부모는 그대로
        assert parent.in_witness_block is False

    def test_overlay_unknown_flag(self):
        with pytest.raises(TypeError):
            SnarkFrame().overlay(in_orbit=True)

    def test_immutable(self):
        frame = SnarkFrame()
        with pytest.raises(AttributeError):
            frame.in_prover = True

    def test_equality(self):
        assert SnarkFrame(in_prover=True) == SnarkFrame().overlay(in_prover=True)
        assert SnarkFrame(in_prover=True) != SnarkFrame()


# ─────────────────────────────────────────────────────────────────────
# 모드 판정 테스트
# ─────────────────────────────────────────────────────────────────────

class TestModePredicates:
    """in_checked_computation / in_prover / in_analyze 테스트."""

    def test_ambient_flags_false(self):
        assert in_checked_computation() is False
        assert in_prover() is False
        assert in_analyze() is False

    def test_nested_frames_merge(self):
        """잎(leaf)에서 보이는 플래그는 모든 조상 프레임의 overlay이다."""
        with snark_scope(in_checked_computation=True):
            with snark_scope(in_analyze=True):
                with snark_scope(in_prover=True):
                    frame = snark_context.get()
                    assert frame == SnarkFrame(
                        in_checked_computation=True,
                        in_analyze=True,
                        in_prover=True,
                    )
                assert in_prover() is False
                assert in_analyze() is True
            assert in_analyze() is False
            assert in_checked_computation() is True
        assert snark_context.get() == SnarkFrame()
        assert snark_context.depth() == 0

    def test_inner_frame_can_clear_flag(self):
        with snark_scope(in_prover=True):
            with snark_scope(in_prover=False):
                assert in_prover() is False
            assert in_prover() is True

    def test_restored_after_exception(self):
        with pytest.raises(RuntimeError):
            with snark_scope(in_checked_computation=True):
                with snark_scope(in_witness_block=True):
                    raise RuntimeError("fail")
        assert snark_context.get() == SnarkFrame()

    def test_isolated_per_context(self):
        """복사된 contextvars 컨텍스트 안의 프레임은 바깥에 보이지 않는다."""
        seen = []

        def task():
            frame_id = snark_context.enter(SnarkFrame(in_checked_computation=True))
            seen.append(in_checked_computation())
            # 일부러 leave하지 않음: 복사된 컨텍스트와 함께 버려진다
            return frame_id

        contextvars.copy_context().run(task)
        assert seen == [True]
        assert in_checked_computation() is False
        assert snark_context.depth() == 0
