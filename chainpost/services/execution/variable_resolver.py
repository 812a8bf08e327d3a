"""Variable resolution for request templates."""

import re

from chainpost.models.collection import Collection
from chainpost.models.dynamic_variable import DynamicVariable
from chainpost.models.environment import Environment
from chainpost.models.request import BaseRequest
from chainpost.services.data_generator import DataGeneratorService


class VariableResolver:
    """
    Resolves {{ variable }} patterns against the environment/collection scope chain.

    Lookup order (first hit wins):
    1. collection static variable
    2. environment static variable
    3. request dynamic variable
    4. collection dynamic variable
    5. environment dynamic variable

    Dynamic variables produce a fresh value on every resolution pass.
    Unresolved placeholders are left in place.
    """

    VARIABLE_PATTERN = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")

    def __init__(self, data_generator: DataGeneratorService | None = None):
        self.data_generator = data_generator

    def resolve(
        self,
        template: str | None,
        environment: Environment,
        collection: Collection | None = None,
        request: BaseRequest | None = None,
    ) -> str | None:
        """
        Resolve variables in a string template.

        Args:
            template: String containing {{variable}} patterns
            environment: Environment supplying variables
            collection: Optional collection; its variables win over the environment's
            request: Optional request supplying dynamic variables

        Returns:
            String with known variables replaced by their values
        """
        if not template:
            return template

        def replacer(match: re.Match) -> str:
            value = self.get_variable_value(match.group(1), environment, collection, request)
            if value is None:
                # Keep original placeholder if variable not found
                return match.group(0)
            return value

        return self.VARIABLE_PATTERN.sub(replacer, template)

    def resolve_dict(
        self,
        obj: dict[str, str] | None,
        environment: Environment,
        collection: Collection | None = None,
        request: BaseRequest | None = None,
    ) -> dict[str, str]:
        """Resolve variables in both keys and values of a string map."""
        if not obj:
            return {}

        return {
            self.resolve(key, environment, collection, request): self.resolve(value, environment, collection, request)
            for key, value in obj.items()
        }

    def resolve_list(
        self,
        arr: list[str] | None,
        environment: Environment,
        collection: Collection | None = None,
        request: BaseRequest | None = None,
    ) -> list[str]:
        if not arr:
            return []
        return [self.resolve(item, environment, collection, request) for item in arr]

    def get_variable_value(
        self,
        name: str,
        environment: Environment,
        collection: Collection | None = None,
        request: BaseRequest | None = None,
    ) -> str | None:
        """Look up a single variable through the scope chain, or None if absent."""
        # Static values take precedence; collection over environment
        if collection is not None and name in collection.variables:
            return collection.variables[name]
        if name in environment.variables:
            return environment.variables[name]

        if self.data_generator is None:
            return None

        for definitions in (
            request.dynamic_variables if request is not None else None,
            collection.dynamic_variables if collection is not None else None,
            environment.dynamic_variables,
        ):
            dynamic_variable = _find_dynamic(definitions, name)
            if dynamic_variable is not None:
                return self.data_generator.generate_value(dynamic_variable)

        return None

    def set_variable_value(
        self,
        name: str,
        value: str,
        environment: Environment,
        collection: Collection | None = None,
        save_to_collection: bool = False,
    ) -> None:
        """Write a variable into the collection (if requested and present) or the environment."""
        if save_to_collection and collection is not None:
            collection.variables[name] = value
        else:
            environment.variables[name] = value

    def contains_variables(self, template: str | None) -> bool:
        """Check if a string contains any {{variable}} patterns."""
        if not template:
            return False
        return bool(self.VARIABLE_PATTERN.search(template))

    def extract_variable_names(self, template: str | None) -> set[str]:
        """Extract all variable names from a template."""
        if not template:
            return set()
        return {match.group(1) for match in self.VARIABLE_PATTERN.finditer(template)}


def _find_dynamic(definitions: list[DynamicVariable] | None, name: str) -> DynamicVariable | None:
    for dynamic_variable in definitions or ():
        if dynamic_variable.name == name:
            return dynamic_variable
    return None
