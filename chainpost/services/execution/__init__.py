"""Request execution engine: resolution, dispatch and extraction."""

from chainpost.services.execution.executor_factory import RequestExecutorFactory
from chainpost.services.execution.request_cloner import RequestCloner
from chainpost.services.execution.response_extractor import ResponseValueExtractor
from chainpost.services.execution.secret_variables import (
    SeparatedVariables,
    merge_secret_variables,
    separate_variables,
)
from chainpost.services.execution.variable_resolver import VariableResolver

__all__ = [
    "RequestExecutorFactory",
    "RequestCloner",
    "ResponseValueExtractor",
    "SeparatedVariables",
    "merge_secret_variables",
    "separate_variables",
    "VariableResolver",
]
