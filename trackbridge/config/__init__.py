"""Settings and logging for trackbridge.

Values are read from the environment and ``.env``; nested sections use
``__`` as the delimiter, e.g. ``PIPELINE__BATCH_SIZE=20``.

```python
from trackbridge.config import get_config, get_logger

logger = get_logger(__name__)
batch_size = get_config("PIPELINE_BATCH_SIZE", 10)
```
"""

from .logging import (
    get_logger,
    log_startup_info,
    resilient_operation,
    setup_loguru_logger,
)
from .settings import get_config, settings

__all__ = [
    "get_config",
    "get_logger",
    "log_startup_info",
    "resilient_operation",
    "settings",
    "setup_loguru_logger",
]
