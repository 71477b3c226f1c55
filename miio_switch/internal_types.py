# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Type hints used internally by this package"""

from __future__ import annotations

from typing import (
    Dict, List, Optional, Union, Any, Tuple, Type, Callable, Iterable, Iterator,
    Mapping, MutableMapping, Sequence, ContextManager,
  )

from types import TracebackType

from typing_extensions import TypeAlias

Jsonable: TypeAlias = Union[str, int, float, bool, None, Dict[str, Any], List[Any]]
"""A type hint for a value that can be serialized to JSON"""

JsonableDict: TypeAlias = Dict[str, Jsonable]
"""A type hint for a JSON object"""
