"""Shared fixtures: in-memory database, scripted LLM client and ASGI client."""
from __future__ import annotations

from typing import Any, Callable

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from ai.dashscope import LLMError, get_llm_client
from linguala.api import app
from linguala.config import settings
from linguala.db import build_engine, create_tables, get_session
from linguala.rate_limit import limiter


class FakeLLMClient:
    """Stands in for DashScopeClient; replies are scripted per test.

    ``replies`` items are returned in order; an exception instance is
    raised instead. ``responder`` computes a reply from the call when set.
    """

    def __init__(self) -> None:
        self.replies: list[Any] = []
        self.responder: Callable[[str, list[dict]], str] | None = None
        self.calls: list[dict[str, Any]] = []
        self.configured = True

    async def complete(self, model: str, messages: list[dict[str, str]], **kwargs: Any) -> str:
        self.calls.append({"model": model, "messages": messages, **kwargs})
        if self.responder is not None:
            return self.responder(model, messages)
        if not self.replies:
            raise LLMError("API request failed: no scripted reply")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def ping(self) -> str:
        return await self.complete(settings.dashscope.writing_model, [{"role": "user", "content": "test"}])


@pytest.fixture(autouse=True)
def fast_settings(monkeypatch, tmp_path):
    monkeypatch.setattr(settings.translation, "chunk_delay", 0.0)
    monkeypatch.setattr(settings.storage, "upload_dir", str(tmp_path / "uploads"))
    monkeypatch.setattr(settings.ocr, "enabled", False)
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
async def engine():
    engine = build_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture
async def client(session_maker, llm):
    async def override_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_llm_client] = lambda: llm
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def register_and_login(client: AsyncClient, email: str = "ana@example.com", password: str = "secret123") -> dict[str, str]:
    response = await client.post("/api/auth/register", json={"email": email, "password": password})
    assert response.status_code == 201, response.text
    response = await client.post("/api/auth/token", data={"username": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def login(client):
    """Register a user and return bearer headers for it."""
    async def _login(email: str = "ana@example.com", password: str = "secret123") -> dict[str, str]:
        return await register_and_login(client, email, password)
    return _login


@pytest.fixture
async def auth_headers(login) -> dict[str, str]:
    return await login()


def build_docx() -> bytes:
    import io

    import docx

    document = docx.Document()
    document.core_properties.title = "Quarterly report"
    document.add_paragraph("Quarterly report", style="Title")
    document.add_heading("Summary", level=2)
    document.add_paragraph("Revenue grew in every region.")
    document.add_paragraph("Hire two engineers", style="List Bullet")
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def build_pdf(pages: list[str], title: str | None = None) -> bytes:
    import io

    from reportlab.lib.pagesizes import LETTER
    from reportlab.pdfgen import canvas

    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=LETTER)
    if title:
        pdf.setTitle(title)
    for text in pages:
        y = 720
        for line in text.splitlines():
            pdf.drawString(72, y, line)
            y -= 16
        pdf.showPage()
    pdf.save()
    return buffer.getvalue()


@pytest.fixture
def docx_bytes() -> bytes:
    return build_docx()


@pytest.fixture
def pdf_bytes() -> bytes:
    return build_pdf(
        [
            "The first page talks about translation quality.\nIt has two lines of text.",
            "The second page closes the report with a short summary.",
        ],
        title="Annual summary",
    )
