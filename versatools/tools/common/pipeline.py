"""Tool registry mapping tool ids to engines and their descriptors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List

from .interfaces import ProcessingEngine, ToolCategory


@dataclass(frozen=True)
class ToolDescriptor:
    """Public, immutable description of a registered tool."""

    id: str
    name: str
    category: ToolCategory
    description: str
    ai_exposed: bool

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "description": self.description,
            "aiExposed": self.ai_exposed,
        }


@dataclass(frozen=True)
class RegisteredTool:
    engine: ProcessingEngine
    descriptor: ToolDescriptor


class ToolRegistry:
    """Registry storing the engines available to a process.

    Populate it once at startup with :func:`versatools.tools.initialize_tools`
    and hand the instance to the dispatcher and router. Lookups never raise.
    """

    def __init__(self) -> None:
        self._tools: Dict[str, RegisteredTool] = {}

    def register(
        self,
        engine: ProcessingEngine,
        *,
        name: str,
        category: ToolCategory | str,
        description: str,
        ai_exposed: bool,
    ) -> ToolDescriptor:
        # Re-registering an id replaces the entry in place.
        descriptor = ToolDescriptor(
            id=engine.tool_id,
            name=name,
            category=ToolCategory(category),
            description=description,
            ai_exposed=ai_exposed,
        )
        self._tools[engine.tool_id] = RegisteredTool(engine=engine, descriptor=descriptor)
        return descriptor

    def get(self, tool_id: str) -> RegisteredTool | None:
        return self._tools.get(tool_id)

    def get_engine(self, tool_id: str) -> ProcessingEngine | None:
        entry = self._tools.get(tool_id)
        return entry.engine if entry else None

    def get_descriptor(self, tool_id: str) -> ToolDescriptor | None:
        entry = self._tools.get(tool_id)
        return entry.descriptor if entry else None

    def ids(self) -> List[str]:
        return list(self._tools.keys())

    def list_all(self) -> List[ToolDescriptor]:
        return [entry.descriptor for entry in self._tools.values()]

    def list_ai_exposed(self) -> List[ToolDescriptor]:
        return [entry.descriptor for entry in self._tools.values() if entry.descriptor.ai_exposed]

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, tool_id: object) -> bool:
        return tool_id in self._tools

    def __iter__(self) -> Iterator[RegisteredTool]:
        return iter(list(self._tools.values()))


__all__ = ["ToolDescriptor", "RegisteredTool", "ToolRegistry"]
