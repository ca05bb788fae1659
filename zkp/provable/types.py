"""
증명 가능 타입 디스크립터 (Provable Type Descriptor)
=====================================================

임의의 값을 회로 형태로 옮기기 위한 계약(contract).

**필수 연산**:
  - size_in_fields(): 필드 원소 개수 (값과 무관한 상수)
  - to_fields(v): 정확히 size_in_fields()개의 필드 원소로 직렬화
  - to_auxiliary(v=None): 회로 밖 메타데이터. 값 없이도 형태를 만들 수 있어야 함
  - from_fields(fields, aux): 값 복원
  - check(v): v의 타입 불변식을 제약으로 표현 (필드 표현은 바꾸지 않음)

**왕복 법칙**:
    from_fields(to_fields(v), to_auxiliary(v)) ≅ v

**선택 기능** (명시적 슬롯):
  | 기능   | 플래그     | 메서드                |
  |--------|------------|-----------------------|
  | JSON   | has_json   | to_json / from_json   |
  | 해시   | has_input  | to_input              |

  플래그가 꺼진 타입에 선택 기능을 요청하면 MissingCapabilityError가 발생한다.
"""

from zkp.provable.errors import MissingCapabilityError


CAPABILITIES = {
    "json": "has_json",
    "input": "has_input",
}


class ProvableType:
    """모든 타입 디스크립터의 기반 클래스.

    서브클래스는 필수 연산 다섯 개를 구현하고, 지원하는 선택 기능의
    플래그(has_json, has_input)를 켠다.
    """

    has_json = False
    has_input = False

    @property
    def type_name(self):
        return type(self).__name__

    def size_in_fields(self):
        raise NotImplementedError

    def to_fields(self, value):
        raise NotImplementedError

    def to_auxiliary(self, value=None):
        raise NotImplementedError

    def from_fields(self, fields, aux=None):
        raise NotImplementedError

    def check(self, value):
        raise NotImplementedError

    def to_json(self, value):
        raise MissingCapabilityError("to_json", self.type_name, "json")

    def from_json(self, json):
        raise MissingCapabilityError("from_json", self.type_name, "json")

    def to_input(self, value):
        raise MissingCapabilityError("to_input", self.type_name, "input")

    def __repr__(self):
        return self.type_name


def require_capability(provable_type, capability, method):
    """provable_type이 capability("json" 또는 "input")를 지원하는지 확인한다.

    Raises:
        MissingCapabilityError: 지원하지 않을 때
    """
    if not getattr(provable_type, CAPABILITIES[capability]):
        raise MissingCapabilityError(method, provable_type.type_name, capability)


class HashInput:
    """해시 입력: 필드 원소 리스트와 (필드, 비트 길이) 압축 리스트.

    속성:
        fields: Field 리스트
        packed: (Field, bit_length) 튜플 리스트
    """

    def __init__(self, fields=None, packed=None):
        self.fields = list(fields or [])
        self.packed = list(packed or [])

    @classmethod
    def empty(cls):
        return cls()

    @staticmethod
    def append(left, right):
        """두 해시 입력을 이어 붙인 새 HashInput을 반환한다."""
        return HashInput(left.fields + right.fields, left.packed + right.packed)

    def __repr__(self):
        return f"HashInput(fields={len(self.fields)}, packed={len(self.packed)})"
