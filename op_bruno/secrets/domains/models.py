"""Domain models for Bruno environments and extracted secrets."""
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Variable:
    """A single variable declared in a Bruno environment file."""
    name: str
    value: Optional[str] = None
    enabled: bool = True
    is_secret: bool = False

    def with_value(self, value: Optional[str]) -> "Variable":
        """Return a copy of this variable holding a different value."""
        return replace(self, value=value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value,
            "enabled": self.enabled,
            "isSecret": self.is_secret,
        }


@dataclass(frozen=True)
class Environment:
    """Parsed contents of one environment file."""
    name: str
    variables: List[Variable] = field(default_factory=list)

    @property
    def secrets(self) -> List[Variable]:
        return [v for v in self.variables if v.is_secret]


# environment name -> secret variables, in environment order
SecretMap = Dict[str, List[Variable]]


def count_secrets(secret_map: SecretMap) -> int:
    """Total number of secret variables across all environments."""
    return sum(len(variables) for variables in secret_map.values())


def secret_map_to_dict(secret_map: SecretMap) -> Dict[str, List[Dict[str, Any]]]:
    """Convert a SecretMap into plain data suitable for JSON/YAML dumping."""
    return {
        env: [variable.to_dict() for variable in variables]
        for env, variables in secret_map.items()
    }
