"""Priority-based reservation / ticket dispatch engine (in-process).

Components:
- a bounded waiting line ordered by priority class, then arrival
- a pool of service counters, some specialized by category
- a Dispatcher driving each request through its lifecycle
- read-side statistics recomputed on demand

`DispatchService` offers the same operations as dict messages, and
`python -m reservation_queue.app` runs a simulation or a demo.
"""

from .config import EngineConfig
from .dispatcher import Dispatcher
from .models import PriorityClass, RequestStatus
from .service import DispatchService

__all__ = ["Dispatcher", "DispatchService", "EngineConfig", "PriorityClass", "RequestStatus"]
