"""Tests for the httpx page surface and the Claude model client."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from anthropic.types import TextBlock

from deep_research.browser import HttpxPageBrowser, PageInfo
from deep_research.errors import PageFetchFailure
from deep_research.llm import ClaudeModelClient, Completion

PAGE = """
<html><head><title>Pricing &amp; Plans</title><script>var x = 1;</script></head>
<body><nav>Home</nav><p>The Pro plan costs $20 per month.</p></body></html>
"""


def handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/pricing":
        return httpx.Response(200, text=PAGE)
    if request.url.path == "/old":
        return httpx.Response(301, headers={"Location": "https://example.com/pricing"})
    return httpx.Response(404, text="not found")


@pytest.fixture
def browser() -> HttpxPageBrowser:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)
    return HttpxPageBrowser(client=client)


class TestHttpxPageBrowser:
    async def test_navigate_and_extract(self, browser: HttpxPageBrowser) -> None:
        await browser.navigate("https://example.com/pricing")

        content = await browser.extract_content()
        assert "The Pro plan costs $20 per month." in content.text
        assert "var x" not in content.text
        assert content.html == PAGE

        info = await browser.get_page_info()
        assert info == PageInfo(title="Pricing & Plans", url="https://example.com/pricing")

    async def test_follows_redirects(self, browser: HttpxPageBrowser) -> None:
        await browser.navigate("https://example.com/old")
        info = await browser.get_page_info()
        assert info.url == "https://example.com/pricing"

    async def test_http_error_raises_fetch_failure(self, browser: HttpxPageBrowser) -> None:
        await browser.navigate("https://example.com/pricing")

        with pytest.raises(PageFetchFailure, match="missing"):
            await browser.navigate("https://example.com/missing")

        content = await browser.extract_content()
        assert content.html == ""

    async def test_run_script_returns_none(self, browser: HttpxPageBrowser) -> None:
        await browser.navigate("https://example.com/pricing")
        assert await browser.run_script("document.title") is None

    async def test_aclose(self, browser: HttpxPageBrowser) -> None:
        await browser.aclose()
        assert browser._client.is_closed

    async def test_context_manager_closes_client(self) -> None:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        async with HttpxPageBrowser(client=client) as browser:
            await browser.navigate("https://example.com/pricing")
            assert not client.is_closed
        assert client.is_closed


class TestClaudeModelClient:
    async def test_complete(self) -> None:
        client = ClaudeModelClient(api_key="test-key")
        response = MagicMock()
        response.content = [
            TextBlock(type="text", text='{"facts": '),
            TextBlock(type="text", text="[]}"),
        ]
        response.usage.input_tokens = 10
        response.usage.output_tokens = 5
        create = AsyncMock(return_value=response)
        client._client.messages.create = create  # type: ignore[method-assign]

        completion = await client.complete(
            model="test-model",
            messages=[{"role": "user", "content": "hi"}],
            max_tokens=100,
            temperature=0.2,
        )

        assert completion == Completion(content='{"facts": []}')
        create.assert_awaited_once_with(
            model="test-model",
            max_tokens=100,
            temperature=0.2,
            messages=[{"role": "user", "content": "hi"}],
        )

    def test_reads_key_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLAUDE_API_KEY", "env-key")
        client = ClaudeModelClient()
        assert client._client.api_key == "env-key"
