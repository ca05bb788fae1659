"""
배열 / 복합 타입 결합자 (Array / Composite Combinator)
=======================================================

원소 디스크립터로부터 고정 길이 배열과 레코드(struct)의 디스크립터를 만든다.

**배열 array(E, n)**:
  - size_in_fields = n · E.size_in_fields()
  - to_fields: 원소별 직렬화를 순서대로 이어 붙임
  - to_auxiliary: 원소별 보조 데이터. 값이 없으면 n개의 None으로 형태만 유도
  - from_fields: 평탄한 필드 리스트를 n개의 같은 크기 조각으로 나눠 복원
  - check: 모든 원소에 E.check

**레코드 struct(x=E1, y=E2, ...)**:
  선언 순서대로 같은 규칙을 적용한다. 값은 dict이다.

**선택 기능**:
  원소(멤버) 타입이 JSON/해시 입력을 지원하지 않으면, 해당 메서드는
  어떤 원소도 건드리기 전에 MissingCapabilityError를 던진다.

사용 예시:
    >>> Vec5 = array(Field.provable, 5)
    >>> Vec5.size_in_fields()
    5
    >>> Point = struct(x=Field.provable, y=Field.provable)
    >>> Point.to_fields({"x": Field(1), "y": Field(2)})
"""

from zkp.provable.errors import ShapeMismatchError
from zkp.provable.types import HashInput, ProvableType, require_capability


class ArrayType(ProvableType):
    """고정 길이 동종 배열의 디스크립터.

    속성:
        element_type: 원소 디스크립터
        length: 배열 길이
    """

    def __init__(self, element_type, length):
        if length < 0:
            raise ValueError(f"배열 길이는 0 이상이어야 합니다: {length}")
        self.element_type = element_type
        self.length = length

    @property
    def type_name(self):
        return f"array({self.element_type.type_name}, {self.length})"

    @property
    def has_json(self):
        return self.element_type.has_json

    @property
    def has_input(self):
        return self.element_type.has_input

    def size_in_fields(self):
        return self.element_type.size_in_fields() * self.length

    def _check_length(self, array, where):
        if len(array) != self.length:
            raise ShapeMismatchError(self.length, len(array), where)

    def to_fields(self, array):
        self._check_length(array, "array.to_fields")
        fields = []
        for element in array:
            fields.extend(self.element_type.to_fields(element))
        return fields

    def to_auxiliary(self, array=None):
        if array is None:
            array = [None] * self.length
        return [self.element_type.to_auxiliary(element) for element in array]

    def from_fields(self, fields, aux=None):
        if len(fields) != self.size_in_fields():
            raise ShapeMismatchError(self.size_in_fields(), len(fields), "array.from_fields")
        if aux is None:
            aux = [None] * self.length
        size = self.element_type.size_in_fields()
        return [
            self.element_type.from_fields(fields[i * size:(i + 1) * size], aux[i])
            for i in range(self.length)
        ]

    def check(self, array):
        for i in range(self.length):
            self.element_type.check(array[i])

    def to_json(self, array):
        require_capability(self.element_type, "json", "array.to_json")
        return [self.element_type.to_json(element) for element in array]

    def from_json(self, json):
        require_capability(self.element_type, "json", "array.from_json")
        return [self.element_type.from_json(element) for element in json]

    def to_input(self, array):
        require_capability(self.element_type, "input", "array.to_input")
        result = HashInput.empty()
        for element in array:
            result = HashInput.append(result, self.element_type.to_input(element))
        return result


def array(element_type, length):
    """원소 디스크립터 element_type의 길이 length 배열 디스크립터를 만든다."""
    return ArrayType(element_type, length)


class StructType(ProvableType):
    """이름 있는 멤버들로 이루어진 레코드의 디스크립터. 값은 dict이다."""

    def __init__(self, entries):
        if not entries:
            raise ValueError("struct에는 멤버가 하나 이상 필요합니다")
        self.entries = dict(entries)

    @property
    def type_name(self):
        members = ", ".join(f"{name}={t.type_name}" for name, t in self.entries.items())
        return f"struct({members})"

    @property
    def has_json(self):
        return all(t.has_json for t in self.entries.values())

    @property
    def has_input(self):
        return all(t.has_input for t in self.entries.values())

    def _require(self, capability, method):
        for entry_type in self.entries.values():
            require_capability(entry_type, capability, method)

    def size_in_fields(self):
        return sum(t.size_in_fields() for t in self.entries.values())

    def to_fields(self, value):
        fields = []
        for name, entry_type in self.entries.items():
            fields.extend(entry_type.to_fields(value[name]))
        return fields

    def to_auxiliary(self, value=None):
        return [
            entry_type.to_auxiliary(None if value is None else value[name])
            for name, entry_type in self.entries.items()
        ]

    def from_fields(self, fields, aux=None):
        if len(fields) != self.size_in_fields():
            raise ShapeMismatchError(self.size_in_fields(), len(fields), "struct.from_fields")
        if aux is None:
            aux = [None] * len(self.entries)
        value = {}
        offset = 0
        for (name, entry_type), entry_aux in zip(self.entries.items(), aux):
            size = entry_type.size_in_fields()
            value[name] = entry_type.from_fields(fields[offset:offset + size], entry_aux)
            offset += size
        return value

    def check(self, value):
        for name, entry_type in self.entries.items():
            entry_type.check(value[name])

    def to_json(self, value):
        self._require("json", "struct.to_json")
        return {name: t.to_json(value[name]) for name, t in self.entries.items()}

    def from_json(self, json):
        self._require("json", "struct.from_json")
        return {name: t.from_json(json[name]) for name, t in self.entries.items()}

    def to_input(self, value):
        self._require("input", "struct.to_input")
        result = HashInput.empty()
        for name, entry_type in self.entries.items():
            result = HashInput.append(result, entry_type.to_input(value[name]))
        return result


def struct(**entries):
    """이름=디스크립터 쌍으로 레코드 디스크립터를 만든다 (선언 순서 유지)."""
    return StructType(entries)
