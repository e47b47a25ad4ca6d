"""
k8slse - Kubernetes container enumeration with an embedded audit script

Finds the containers of a namespace, works out which of them can run the
audit script and runs it in all of them at once, one report per container.

Architecture:
- Each module is self-contained with clear interfaces
- Stages talk to each other only through bounded queues
- Cluster access is hidden behind the executor and inventory modules

Modules:
- config: Environment settings and probe profiles
- executor: Running one command inside one container
- inventory: Discovering pods and containers
- status: Serialized status/progress output
- pool: Bounded feeder/worker/collector pool shared by both stages
- pipeline: Run context, confirmation gate, run orchestration
- prober: Shell and utility capability probing
- scanner: Concurrent audit script execution
- report: Report rendering and persistence
"""

__version__ = "1.0.0"
