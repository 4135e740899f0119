"""Action Executor（动作执行器）

Infrastructure 层：实现动作节点执行器

支持的动作类型（config.actionType）：
- http: 发送 HTTP 请求（httpx），返回 JSON 响应或文本
- set: 返回 config.parameters（输入为 dict 时合并到输入之上）
- log: 记录输入并透传
- fail: 以 config.message 抛出错误（用于测试错误分支）
"""

import json
import logging
from typing import Any

import httpx

from src.domain.entities.node import Node
from src.domain.exceptions import DomainError
from src.domain.ports.node_executor import NodeExecutor
from src.domain.services.payload import merge_inputs

logger = logging.getLogger(__name__)

BODY_METHODS = ("POST", "PUT", "PATCH")


class ActionExecutor(NodeExecutor):
    """动作节点执行器"""

    def __init__(self, http_timeout: float = 30.0, transport: httpx.AsyncBaseTransport | None = None):
        self.http_timeout = http_timeout
        self._transport = transport

    async def execute(self, node: Node, inputs: dict[str, Any], context: dict[str, Any]) -> Any:
        action_type = node.config.get("actionType", "")
        data = merge_inputs(inputs)

        if action_type == "http":
            return await self._http(node, data)
        elif action_type == "set":
            return self._set(node, data)
        elif action_type == "log":
            logger.info(
                "动作节点 %s 日志: %s",
                node.name,
                data,
                extra={"execution_id": context.get("execution_id"), "node_id": node.id},
            )
            return data
        elif action_type == "fail":
            raise DomainError(node.config.get("message") or f"动作节点 {node.name} 执行失败")
        else:
            raise DomainError(f"不支持的动作类型: {action_type or '(未配置)'}")

    @staticmethod
    def _set(node: Node, data: Any) -> Any:
        parameters = node.config.get("parameters") or {}
        if not isinstance(parameters, dict):
            raise DomainError("set 动作的 parameters 必须是对象")
        if isinstance(data, dict):
            return {**data, **parameters}
        return dict(parameters)

    async def _http(self, node: Node, data: Any) -> Any:
        """发送 HTTP 请求

        配置参数：
            url: 请求 URL
            method: 请求方法（默认 GET）
            headers: 请求头（对象或 JSON 字符串）
            body: 请求体（对象或 JSON 字符串；未配置时 POST/PUT/PATCH 发送节点输入）
        """
        url = node.config.get("url", "")
        method = str(node.config.get("method", "GET")).upper()
        if not url:
            raise DomainError("HTTP 动作缺少 url 配置")

        headers = self._parse_json(node.config.get("headers"), "headers") or {}
        body = None
        if method in BODY_METHODS:
            body = self._parse_json(node.config.get("body"), "body")
            if body is None:
                body = data

        try:
            async with httpx.AsyncClient(
                timeout=self.http_timeout, transport=self._transport
            ) as client:
                response = await client.request(method=method, url=url, headers=headers, json=body)
                response.raise_for_status()
                try:
                    return response.json()
                except json.JSONDecodeError:
                    return response.text
        except httpx.HTTPStatusError as e:
            raise DomainError(
                f"HTTP 请求失败: {e.response.status_code} {e.response.text}"
            ) from e
        except httpx.RequestError as e:
            raise DomainError(f"HTTP 请求错误: {e}") from e

    @staticmethod
    def _parse_json(value: Any, field: str) -> Any:
        if value is None or value == "":
            return None
        if not isinstance(value, str):
            return value
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise DomainError(f"HTTP 动作 {field} 格式错误: {value}") from e
