"""Splitting variable maps into secret and plain parts, and merging them back."""

from dataclasses import dataclass, field


@dataclass
class SeparatedVariables:
    """Result of separating secret and non-secret variables."""
    secret_variables: dict[str, str] = field(default_factory=dict)
    plain_variables: dict[str, str] = field(default_factory=dict)


def separate_variables(variables: dict[str, str], secret_names: set[str]) -> SeparatedVariables:
    """
    Separate variables by the set of names flagged secret.

    Args:
        variables: All variables to separate
        secret_names: Names whose values are persisted through the secret store

    Returns:
        SeparatedVariables with the two disjoint maps
    """
    result = SeparatedVariables()
    for name, value in variables.items():
        if name in secret_names:
            result.secret_variables[name] = value
        else:
            result.plain_variables[name] = value
    return result


def merge_secret_variables(target: dict[str, str], secrets: dict[str, str]) -> None:
    """Overlay secret values back onto a plain variable map in place."""
    for name, value in secrets.items():
        target[name] = value
