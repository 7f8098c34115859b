"""
swarmtopo Topologies
====================

One coroutine per communication pattern. Each validates its inputs,
runs inside a named metrics timer, logs every successful worker call
into a fresh Conversation, and returns the history or the responses.
"""

from swarmtopo.topologies.base import TopologyResult, gather_or_cancel, invoke
from swarmtopo.topologies.circular import circular
from swarmtopo.topologies.layered import grid, linear, pyramid
from swarmtopo.topologies.mesh import mesh
from swarmtopo.topologies.relay import broadcast, one_to_one, one_to_three
from swarmtopo.topologies.star import star

__all__ = [
    "TopologyResult",
    "gather_or_cancel",
    "invoke",
    # Core
    "circular",
    "star",
    "mesh",
    "one_to_one",
    "broadcast",
    # Layered / relay variants
    "linear",
    "grid",
    "pyramid",
    "one_to_three",
]
