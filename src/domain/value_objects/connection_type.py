"""ConnectionType 枚举 - 连接类型

激活规则（源节点执行结束后判断）：
- DEFAULT: 源节点完成即激活；源节点为条件节点时按 config.branch 匹配结果
- SUCCESS: 源节点完成即激活；源节点为条件节点时要求结果为 True
- ERROR: 源节点重试耗尽后失败时激活
- CONDITION: 源节点完成且所有附加条件成立时激活
"""

from enum import Enum


class ConnectionType(str, Enum):
    DEFAULT = "default"
    SUCCESS = "success"
    ERROR = "error"
    CONDITION = "condition"
