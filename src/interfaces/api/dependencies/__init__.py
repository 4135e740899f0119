"""DI helpers."""

from .execution import (  # noqa: F401
    create_execute_use_case,
    create_execution_engine,
    get_executor_registry,
    get_session_factory,
    set_executor_registry,
)
from .scheduler import (  # noqa: F401
    clear_scheduler,
    get_optional_scheduler,
    get_scheduler,
    set_scheduler,
)
