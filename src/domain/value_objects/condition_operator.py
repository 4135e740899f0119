"""ConditionOperator 枚举 - 连接条件支持的运算符"""

from enum import Enum


class ConditionOperator(str, Enum):
    EQ = "eq"
    NE = "ne"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    CONTAINS = "contains"
    IN = "in"
    EXISTS = "exists"
    TRUTHY = "truthy"
    REGEX = "regex"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]
