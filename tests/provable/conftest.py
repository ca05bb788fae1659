import pytest

from zkp.provable.circuit import circuit_context
from zkp.provable.context import snark_context
from zkp.provable.memo import memoization_context


@pytest.fixture(autouse=True)
def balanced_contexts():
    """모든 테스트가 끝난 뒤 컨텍스트 스택이 비어 있어야 한다."""
    yield
    assert snark_context.depth() == 0
    assert circuit_context.depth() == 0
    assert memoization_context.depth() == 0
