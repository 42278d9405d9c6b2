"""Application facade exports for stable use-case API."""

from hncsel.application.propagation_check_use_case import (
    execute_directive_validation,
    execute_propagation_check,
    execute_propagation_matrix,
    parse_label_args,
)
from hncsel.application.run_writer import RunResult

__all__ = [
    "execute_directive_validation",
    "execute_propagation_check",
    "execute_propagation_matrix",
    "parse_label_args",
    "RunResult",
]
