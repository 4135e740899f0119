"""测试：值对象（RetryPolicy / Page / 枚举）"""

import pytest

from src.domain.exceptions import DomainError
from src.domain.value_objects.condition_operator import ConditionOperator
from src.domain.value_objects.node_type import NodeType
from src.domain.value_objects.page import Page
from src.domain.value_objects.retry_policy import RetryPolicy


class TestRetryPolicy:
    def test_delay_grows_exponentially_and_is_capped(self):
        policy = RetryPolicy(max_retries=5, backoff_factor=2, initial_delay=1, max_delay=5)

        assert policy.delay_for(0) == 0.0
        assert policy.delay_for(1) == 1
        assert policy.delay_for(2) == 2
        assert policy.delay_for(3) == 4
        assert policy.delay_for(4) == 5

    def test_should_retry_until_max_retries(self):
        policy = RetryPolicy(max_retries=2)

        assert policy.should_retry(1) is True
        assert policy.should_retry(2) is True
        assert policy.should_retry(3) is False

    def test_default_policy_does_not_retry(self):
        assert RetryPolicy().should_retry(1) is False

    def test_with_overrides_uses_node_config(self):
        policy = RetryPolicy().with_overrides({"maxRetries": 3, "initialDelay": "0.1"})

        assert policy.max_retries == 3
        assert policy.initial_delay == 0.1
        assert policy.backoff_factor == 2.0

    @pytest.mark.parametrize(
        "overrides",
        [{"maxRetries": -1}, {"backoffFactor": 0.5}, {"maxRetries": "many"}, "3"],
    )
    def test_invalid_overrides_should_raise_error(self, overrides):
        with pytest.raises(DomainError):
            RetryPolicy().with_overrides(overrides)


class TestPage:
    def test_total_pages_rounds_up(self):
        assert Page(items=[], total=21, page=1, limit=10).total_pages == 3
        assert Page(items=[], total=0, page=1, limit=10).total_pages == 0

    def test_offset(self):
        assert Page(page=3, limit=20).offset == 40


def test_node_type_values_match_api_names():
    assert NodeType("subMatrix") == NodeType.SUB_MATRIX
    assert len(list(NodeType)) == 7


def test_condition_operator_values():
    assert "regex" in ConditionOperator.values()
    assert "between" not in ConditionOperator.values()
