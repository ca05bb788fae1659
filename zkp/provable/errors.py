"""
증명 가능 값(provable value) 계층의 오류 분류
===============================================

이 계층의 모든 실패는 호출자에게 그대로 전파된다. 재시도는 없다.

  | 오류                     | 의미                                          |
  |--------------------------|-----------------------------------------------|
  | ShapeMismatchError       | 직렬화된 필드 수가 선언된 크기와 다름          |
  | MissingCapabilityError   | 없는 선택적 코덱(JSON, 해시 입력)을 요청함     |
  | ConstraintViolationError | check / 게이트 제약이 만족되지 않음            |
  | ContextImbalanceError    | 컨텍스트 enter/leave 순서 위반 (프로그래밍 오류)|
"""


class ProvableError(Exception):
    """이 계층에서 발생하는 모든 오류의 기반 클래스."""


class ShapeMismatchError(ProvableError, ValueError):
    """직렬화된 원소 개수가 타입이 선언한 크기와 일치하지 않는다."""

    def __init__(self, expected, actual, where="witness"):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{where}: 원소 {expected}개가 필요하지만 {actual}개를 받았습니다"
        )


class MissingCapabilityError(ProvableError, TypeError):
    """타입 디스크립터에 요청된 선택적 기능이 없다."""

    def __init__(self, method, type_name, capability):
        self.method = method
        self.capability = capability
        super().__init__(
            f"{method}: 원소 타입 {type_name}에는 {capability} 기능이 없습니다"
        )


class ConstraintViolationError(ProvableError, AssertionError):
    """제약(constraint)이 만족되지 않는다."""


class ContextImbalanceError(ProvableError, RuntimeError):
    """컨텍스트 프레임이 LIFO 순서로 해제되지 않았다."""
