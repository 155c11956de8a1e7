from __future__ import annotations

import json
from io import BytesIO
from zipfile import ZipFile

import pytest
from fastapi.testclient import TestClient

from apps.backend.app.main import create_app
from versatools import UploadedFile


@pytest.fixture()
def client() -> TestClient:
    return TestClient(create_app())


def _files(*uploads: UploadedFile) -> list[tuple[str, tuple[str, bytes, str]]]:
    return [("files", (upload.filename, upload.data, upload.content_type)) for upload in uploads]


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_list_tools(client: TestClient) -> None:
    response = client.get("/api/tools")

    assert response.status_code == 200
    tools = response.json()
    assert len(tools) == 9
    assert tools[0] == {
        "id": "pdf-merger",
        "name": "PDF 合并",
        "category": "pdf",
        "description": tools[0]["description"],
        "aiExposed": True,
    }


def test_merge_endpoint(client: TestClient, sample_pdfs: list[UploadedFile]) -> None:
    response = client.post("/api/tools/pdf-merger", files=_files(*sample_pdfs))

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["x-content-type-options"] == "nosniff"
    assert "merged-document.pdf" in response.headers["content-disposition"]
    assert json.loads(response.headers["x-tool-metadata"])["pageCount"] == 5
    assert response.content.startswith(b"%PDF")


def test_split_endpoint_with_form_options(client: TestClient, sample_pdf: UploadedFile) -> None:
    response = client.post(
        "/api/tools/pdf-splitter",
        data={"options": json.dumps({"ranges": "1-2"})},
        files=_files(sample_pdf),
    )

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/zip"
    assert ZipFile(BytesIO(response.content)).namelist() == ["page_1.pdf", "page_2.pdf"]


def test_query_options_without_files(client: TestClient) -> None:
    response = client.post("/api/tools/qr-generator", params={"options": json.dumps({"text": "hi", "size": 128})})

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content.startswith(b"\x89PNG")


def test_text_field_is_passed_to_translator(client: TestClient) -> None:
    response = client.post(
        "/api/tools/text-translator",
        data={"text": "hello", "options": json.dumps({"targetLang": "en"})},
    )

    assert response.status_code == 200
    assert response.json() == {"results": [{"lang": "en", "text": "hello"}], "sourceLang": "auto"}


def test_unknown_tool(client: TestClient) -> None:
    response = client.post("/api/tools/nope", data={"x": "1"})
    assert response.status_code == 404
    assert response.json()["error"] == "TOOL_NOT_FOUND"


def test_bad_options_json(client: TestClient, sample_image: UploadedFile) -> None:
    response = client.post(
        "/api/tools/image-compressor",
        data={"options": "{broken"},
        files=_files(sample_image),
    )
    assert response.status_code == 400
    assert response.json()["error"] == "INVALID_OPTIONS"


def test_processing_failure(client: TestClient, sample_pdf: UploadedFile) -> None:
    response = client.post("/api/tools/pdf-merger", files=_files(sample_pdf))
    assert response.status_code == 500
    assert response.json()["retryable"] is True


def test_agent_auto_mode(client: TestClient, sample_pdfs: list[UploadedFile]) -> None:
    response = client.post("/api/agent", params={"prompt": "merge pdf"}, files=_files(*sample_pdfs))

    assert response.status_code == 200
    assert response.headers["x-agent-tool-id"] == "pdf-merger"
    assert response.headers["x-agent-mode"] == "auto"
    assert response.content.startswith(b"%PDF")


def test_agent_manual_mode_failure(client: TestClient, sample_pdf: UploadedFile) -> None:
    response = client.post("/api/agent", params={"toolId": "pdf-merger"}, files=_files(sample_pdf))

    assert response.status_code == 502
    body = response.json()
    assert body["error"] == "TOOL_CALL_FAILED"
    assert body["status"] == 500


def test_agent_requires_prompt(client: TestClient) -> None:
    response = client.post("/api/agent")
    assert response.status_code == 400
    assert response.json()["error"] == "MISSING_PROMPT"
