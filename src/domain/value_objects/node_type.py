"""NodeType 枚举 - 节点类型

业务定义：
- NodeType 定义矩阵中支持的节点类型
- 每种类型对应一个节点执行器（NodeExecutorRegistry 中按 value 注册）
"""

from enum import Enum


class NodeType(str, Enum):
    """节点类型枚举

    支持的节点类型：
    - TRIGGER: 触发节点（矩阵入口，可绑定 Trigger）
    - ACTION: 动作节点（HTTP 请求、设置数据、日志等）
    - CONDITION: 条件节点（求值后决定走 true/false 分支）
    - SUB_MATRIX: 子矩阵节点（嵌套执行另一个矩阵）
    - TRANSFORMER: 数据转换节点
    - LOOP: 循环节点（遍历列表）
    - MONITOR: 监控节点（记录日志并透传数据）
    """

    TRIGGER = "trigger"
    ACTION = "action"
    CONDITION = "condition"
    SUB_MATRIX = "subMatrix"
    TRANSFORMER = "transformer"
    LOOP = "loop"
    MONITOR = "monitor"
