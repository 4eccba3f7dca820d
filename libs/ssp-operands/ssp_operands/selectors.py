"""Kubernetes label selectors."""

import re
from enum import Enum
from typing import Mapping

from pydantic import BaseModel, ConfigDict, model_validator

# Optional DNS subdomain prefix followed by a name segment, e.g.
# "template.kubevirt.io/type" or "app".
_LABEL_KEY_RE = re.compile(
    r"^(([a-z0-9]([-a-z0-9]*[a-z0-9])?)(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*/)?"
    r"[A-Za-z0-9]([-A-Za-z0-9_.]{0,61}[A-Za-z0-9])?$"
)
_LABEL_VALUE_RE = re.compile(r"^([A-Za-z0-9]([-A-Za-z0-9_.]{0,61}[A-Za-z0-9])?)?$")


class Operator(str, Enum):
    """Label selector operator."""

    EQUALS = "="
    NOT_EQUALS = "!="
    IN = "in"
    NOT_IN = "notin"
    EXISTS = "exists"
    DOES_NOT_EXIST = "!"


class Requirement(BaseModel):
    """A single selector requirement."""

    model_config = ConfigDict(frozen=True)

    key: str
    operator: Operator
    values: tuple[str, ...] = ()

    @model_validator(mode="after")
    def _validate(self) -> "Requirement":
        if len(self.key) > 316 or not _LABEL_KEY_RE.match(self.key):
            raise ValueError(f"invalid label key {self.key!r}")
        for value in self.values:
            if not _LABEL_VALUE_RE.match(value):
                raise ValueError(f"invalid label value {value!r} for key {self.key!r}")

        if self.operator in (Operator.EQUALS, Operator.NOT_EQUALS):
            if len(self.values) != 1:
                raise ValueError(f"operator {self.operator.value!r} takes exactly one value")
        elif self.operator in (Operator.IN, Operator.NOT_IN):
            if not self.values:
                raise ValueError(f"operator {self.operator.value!r} takes at least one value")
        elif self.values:
            raise ValueError(f"operator {self.operator.value!r} takes no values")
        return self

    def matches(self, labels: Mapping[str, str]) -> bool:
        """Check whether a label map satisfies this requirement.

        Missing keys satisfy the negative operators, as in the API server.
        """
        present = self.key in labels
        value = labels.get(self.key)
        if self.operator == Operator.EQUALS:
            return present and value == self.values[0]
        if self.operator == Operator.NOT_EQUALS:
            return not present or value != self.values[0]
        if self.operator == Operator.IN:
            return present and value in self.values
        if self.operator == Operator.NOT_IN:
            return not present or value not in self.values
        if self.operator == Operator.EXISTS:
            return present
        return not present

    def __str__(self) -> str:
        if self.operator in (Operator.EQUALS, Operator.NOT_EQUALS):
            return f"{self.key}{self.operator.value}{self.values[0]}"
        if self.operator in (Operator.IN, Operator.NOT_IN):
            return f"{self.key} {self.operator.value} ({','.join(self.values)})"
        if self.operator == Operator.EXISTS:
            return self.key
        return f"!{self.key}"


class Selector(BaseModel):
    """A conjunction of requirements, rendered in the API server's syntax."""

    model_config = ConfigDict(frozen=True)

    requirements: tuple[Requirement, ...] = ()

    def add(self, *requirements: Requirement) -> "Selector":
        """Return a new selector with extra requirements."""
        return Selector(requirements=self.requirements + tuple(requirements))

    def matches(self, labels: Mapping[str, str] | None) -> bool:
        labels = labels or {}
        return all(requirement.matches(labels) for requirement in self.requirements)

    def __str__(self) -> str:
        return ",".join(str(requirement) for requirement in self.requirements)


def requirement(key: str, operator: Operator, *values: str) -> Requirement:
    """
    Build a requirement.

    Raises:
        ValueError: If the key, the values or their count is invalid
    """
    return Requirement(key=key, operator=operator, values=values)
