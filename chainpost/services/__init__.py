from chainpost.services.active_environment_service import ActiveEnvironmentService
from chainpost.services.collection_service import CollectionService
from chainpost.services.data_generator import DataGeneratorService
from chainpost.services.environment_service import EnvironmentService
from chainpost.services.flow_service import FlowService
from chainpost.services.history_service import RequestHistoryService
from chainpost.services.request_service import RequestService
from chainpost.services.secret_variables_service import SecretVariablesService

__all__ = [
    "ActiveEnvironmentService",
    "CollectionService",
    "DataGeneratorService",
    "EnvironmentService",
    "FlowService",
    "RequestHistoryService",
    "RequestService",
    "SecretVariablesService",
]
