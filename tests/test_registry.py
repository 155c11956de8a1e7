from __future__ import annotations

from versatools import (
    EngineKind,
    ProcessingEngine,
    ToolCategory,
    ToolRegistry,
    build_registry,
    initialize_tools,
)
from versatools.tools.merger import PdfMerger
from versatools.tools.qr import QrGenerator

EXPECTED_ORDER = [
    "pdf-merger",
    "pdf-splitter",
    "bg-remover",
    "image-compressor",
    "watermark-remover",
    "file-archiver",
    "text-translator",
    "qr-generator",
    "video-to-gif",
]


def test_builtin_tools_are_registered_in_order(registry: ToolRegistry) -> None:
    assert registry.ids() == EXPECTED_ORDER
    assert [descriptor.id for descriptor in registry.list_all()] == EXPECTED_ORDER


def test_builtin_descriptors(registry: ToolRegistry) -> None:
    merger = registry.get_descriptor("pdf-merger")
    assert merger is not None
    assert merger.name == "PDF 合并"
    assert merger.category is ToolCategory.PDF
    assert merger.as_dict()["aiExposed"] is True
    assert registry.get_descriptor("file-archiver").category is ToolCategory.FILE
    assert registry.get_descriptor("text-translator").category is ToolCategory.TEXT
    assert len(registry.list_ai_exposed()) == len(EXPECTED_ORDER)


def test_engines_match_their_descriptors(registry: ToolRegistry) -> None:
    for entry in registry:
        assert isinstance(entry.engine, ProcessingEngine)
        assert entry.engine.kind is EngineKind(entry.descriptor.id)
        assert entry.engine.tool_id == entry.descriptor.id


def test_lookup_of_unknown_tool_returns_none(registry: ToolRegistry) -> None:
    assert registry.get("nonexistent-tool") is None
    assert registry.get_engine("nonexistent-tool") is None
    assert registry.get_descriptor("nonexistent-tool") is None
    assert "nonexistent-tool" not in registry


def test_initialize_tools_is_idempotent(registry: ToolRegistry) -> None:
    assert initialize_tools(registry) is registry
    assert len(registry) == len(EXPECTED_ORDER)


def test_registering_same_id_replaces_entry() -> None:
    registry = ToolRegistry()
    registry.register(QrGenerator(), name="first", category="image", description="", ai_exposed=True)
    registry.register(QrGenerator(), name="second", category=ToolCategory.IMAGE, description="", ai_exposed=False)

    assert len(registry) == 1
    assert registry.get_descriptor("qr-generator").name == "second"
    assert registry.list_ai_exposed() == []


def test_list_ai_exposed_filters_hidden_tools() -> None:
    registry = ToolRegistry()
    registry.register(PdfMerger(), name="merge", category="pdf", description="", ai_exposed=False)
    registry.register(QrGenerator(), name="qr", category="image", description="", ai_exposed=True)

    assert [tool.id for tool in registry.list_ai_exposed()] == ["qr-generator"]
    assert [tool.id for tool in registry.list_all()] == ["pdf-merger", "qr-generator"]


def test_estimated_duration_has_two_second_floor() -> None:
    engine = build_registry().get_engine("pdf-merger")
    assert engine.estimate_duration(0) == 2.0
    assert engine.estimate_duration(10) == 5.0
    assert build_registry().get_engine("bg-remover").estimate_duration(1) == 5.0
