"""Environment management."""

from chainpost.models.environment import Environment
from chainpost.services.crud_base import SecretAwareCrudService
from chainpost.services.secret_variables_service import ENVIRONMENT_SCOPE


class EnvironmentService(SecretAwareCrudService[Environment]):
    scope = ENVIRONMENT_SCOPE
    entity_name = "Environment"
