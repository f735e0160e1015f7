"""
Doc Doctor - document improvement orchestration and verification engine.

Three independent engines, each an explicit instance owned by the caller:

- ``docdoctor.orchestration``: TaskOrchestrator (what to work on next, how
  far to trust automation, when it will finish, whether a run is stalling)
- ``docdoctor.health``: HealthMonitor (composite health, trends, forecasts)
- ``docdoctor.verification``: ReferenceVerifier (are claimed references
  backed by tool evidence)
"""

__version__ = "0.1.0"

from docdoctor.health import HealthMonitor  # noqa: E402
from docdoctor.orchestration.orchestrator import TaskOrchestrator  # noqa: E402
from docdoctor.verification import ReferenceVerifier  # noqa: E402

__all__ = [
    "__version__",
    "TaskOrchestrator",
    "HealthMonitor",
    "ReferenceVerifier",
]
