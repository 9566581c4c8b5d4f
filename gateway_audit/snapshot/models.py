"""
Numeric snapshot of a gateway configuration.

A snapshot is the fixed-shape projection the rules run against and the codec
stores: integer bit-vectors and counters per scope (service, async agent,
endpoint, backend) plus a component map per scope.

Field names give the readable Python API; the single-letter aliases are the
keys used on the wire:

    >>> Snapshot(flags=[32]).model_dump(by_alias=True)
    {'d': [32], 'a': [], 'e': [], 'c': {}}

Missing or null containers always come out empty, never None.
"""

from collections.abc import Iterator
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, StrictInt


def _list_or_empty(value: Any) -> Any:
    return [] if value is None else value


def _components_or_empty(value: Any) -> Any:
    if value is None:
        return {}
    if isinstance(value, dict):
        return {k: [] if v is None else v for k, v in value.items()}
    return value


IntVector = Annotated[list[StrictInt], BeforeValidator(_list_or_empty)]

# Extension namespace -> namespace specific integer vector
ComponentMap = Annotated[dict[str, list[StrictInt]], BeforeValidator(_components_or_empty)]


class _SnapshotModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def component(self, namespace: str) -> list[int] | None:
        """Vector recorded for `namespace`, or None when it is not attached."""
        return self.components.get(namespace)

    def has_component(self, namespace: str) -> bool:
        return namespace in self.components

    def clone(self):
        """Deep copy sharing no mutable storage with the receiver."""
        return self.model_copy(deep=True)


class BackendSnapshot(_SnapshotModel):
    """flags: [encoding one-hot | backend shape bits]"""

    flags: IntVector = Field(default_factory=list, alias="d")
    components: ComponentMap = Field(default_factory=dict, alias="c")


class EndpointSnapshot(_SnapshotModel):
    """
    flags: [encoding one-hot, query string count, header count, timeout ms,
    wildcard bits, unsafe method count]
    """

    flags: IntVector = Field(default_factory=list, alias="d")
    backends: Annotated[list[BackendSnapshot], BeforeValidator(_list_or_empty)] = Field(
        default_factory=list, alias="b"
    )
    components: ComponentMap = Field(default_factory=dict, alias="c")


class AgentSnapshot(_SnapshotModel):
    """flags: [encoding one-hot, workers, max retries, consumer timeout ms]"""

    flags: IntVector = Field(default_factory=list, alias="d")
    backends: Annotated[list[BackendSnapshot], BeforeValidator(_list_or_empty)] = Field(
        default_factory=list, alias="b"
    )
    components: ComponentMap = Field(default_factory=dict, alias="c")


class Snapshot(_SnapshotModel):
    """Root of the snapshot. flags[0] holds the service-wide bits."""

    flags: IntVector = Field(default_factory=list, alias="d")
    agents: Annotated[list[AgentSnapshot], BeforeValidator(_list_or_empty)] = Field(
        default_factory=list, alias="a"
    )
    endpoints: Annotated[list[EndpointSnapshot], BeforeValidator(_list_or_empty)] = Field(
        default_factory=list, alias="e"
    )
    components: ComponentMap = Field(default_factory=dict, alias="c")

    @property
    def service_flags(self) -> int:
        return self.flags[0] if self.flags else 0

    def iter_endpoint_backends(self) -> Iterator[BackendSnapshot]:
        """Every backend under an endpoint, in declaration order."""
        for endpoint in self.endpoints:
            yield from endpoint.backends
