"""Infrastructure services - scheduling and process wiring."""

from trackbridge.infrastructure.services.batch_scheduler import AsyncioBatchScheduler
from trackbridge.infrastructure.services.runtime import Runtime, open_runtime

__all__ = ["AsyncioBatchScheduler", "Runtime", "open_runtime"]
