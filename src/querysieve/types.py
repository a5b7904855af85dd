"""Type aliases for querysieve package.

This module provides reusable type definitions to ensure consistency
across the codebase and improve code readability.
"""

from typing import Any, Optional, Sequence

# Type hint of a member value, e.g. `int`, `Optional[str]`, `Lambda[bool]`
TypeHint = Any

# Extra context handed down to custom methods after their mandatory arguments
CustomMethodArgs = Optional[Sequence[Any]]
