"""Static description of the simulated network.

The topology never changes while the app runs. Simulation, revision and the
network panel all read it, none of them write to it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class LayerType(str, Enum):
    INPUT = "INPUT"
    CONV = "CONV"
    POOL = "POOL"
    DENSE = "DENSE"
    OUTPUT = "OUTPUT"


@dataclass(frozen=True)
class Layer:
    """One layer descriptor.

    `size` is the neuron count for DENSE/OUTPUT, the feature-map count for
    CONV/POOL and the pixel count for INPUT. `shape` is only informative
    (spatial extent of an image or feature map).
    """

    type: LayerType
    size: int
    shape: tuple[int, ...] | None = None
    name: str = ""

    @property
    def label(self) -> str:
        return self.name or self.type.value.title()


Topology = tuple[Layer, ...]


# Same shape as the Keras classifier the app ships with.
DEFAULT_TOPOLOGY: Topology = (
    Layer(LayerType.INPUT, 784, shape=(28, 28), name="Input"),
    Layer(LayerType.DENSE, 128, name="Dense 1"),
    Layer(LayerType.DENSE, 64, name="Dense 2"),
    Layer(LayerType.OUTPUT, 10, name="Output"),
)

CONV_TOPOLOGY: Topology = (
    Layer(LayerType.INPUT, 784, shape=(28, 28), name="Input"),
    Layer(LayerType.CONV, 8, shape=(26, 26), name="Conv 3x3"),
    Layer(LayerType.POOL, 8, shape=(13, 13), name="MaxPool 2x2"),
    Layer(LayerType.DENSE, 128, name="Dense 1"),
    Layer(LayerType.DENSE, 64, name="Dense 2"),
    Layer(LayerType.OUTPUT, 10, name="Output"),
)

TOPOLOGIES: dict[str, Topology] = {
    "dense": DEFAULT_TOPOLOGY,
    "conv": CONV_TOPOLOGY,
}


def validate_topology(topology: Topology) -> Topology:
    """Raise `ValueError` for topologies the simulator cannot render."""
    if not topology:
        raise ValueError("Topology must contain at least one layer.")
    for index, layer in enumerate(topology):
        if layer.size <= 0:
            raise ValueError(f"Layer {index} ({layer.label}) has non-positive size {layer.size}.")
        if layer.type is LayerType.OUTPUT and index != len(topology) - 1:
            raise ValueError("OUTPUT layer must be the last layer.")
    return tuple(topology)
