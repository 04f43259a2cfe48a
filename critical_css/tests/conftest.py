"""Pytest configuration for critical-css tests."""

import asyncio
import logging
import pytest
from typing import Dict, List, Optional
from ..core.inliner import Inliner
from ..managers.memory import MemoryResolver
from ..utils.config import Options
from ..utils.error import NetworkError

# Configure logging
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


class FakeResolver(MemoryResolver):
    """Memory resolver with per-asset latency and canned remote responses."""

    def __init__(self, root: str, assets: Optional[Dict[str, str]] = None,
                 delays: Optional[Dict[str, float]] = None,
                 remote: Optional[Dict[str, str]] = None):
        super().__init__(root, dict(assets or {}))
        self.delays = delays or {}
        self.remote = remote or {}
        self.requested: List[str] = []
        self.completed: List[str] = []
        self.fetched: List[str] = []
        self.written: Dict[str, str] = {}

    async def read(self, path: str) -> str:
        name = self._name(path)
        self.requested.append(name)
        delay = self.delays.get(name)
        if delay:
            await asyncio.sleep(delay)
        try:
            return await super().read(path)
        finally:
            self.completed.append(name)

    async def fetch(self, url: str) -> str:
        self.fetched.append(url)
        if url not in self.remote:
            raise NetworkError(f"Failed to fetch {url}: HTTP 404")
        return self.remote[url]

    async def write(self, path: str, text: str) -> None:
        self.written[self._name(path)] = text
        await super().write(path, text)


@pytest.fixture
def root(tmp_path):
    """Root directory stylesheets are resolved against."""
    return str(tmp_path)

@pytest.fixture
def make_inliner(root):
    """Create an inliner reading stylesheets from a dict."""
    def factory(assets=None, delays=None, responses=None, **options):
        options.setdefault('path', root)
        resolver = FakeResolver(options['path'], assets, delays, responses)
        return Inliner(Options(**options), resolver=resolver)
    return factory

@pytest.fixture
def run():
    """Run a coroutine to completion."""
    return asyncio.run

@pytest.fixture(scope='session')
def sample_css():
    """Return sample CSS content for testing."""
    return """
    body {
        color: #333;
        margin: 0;
    }

    .container {
        max-width: 1200px;
        margin: 0 auto;
    }

    .header {
        padding: 10px;
    }

    .footer-unused {
        padding: 20px;
    }

    @media (max-width: 768px) {
        .container {
            padding: 0;
        }

        .sidebar-unused {
            display: none;
        }
    }
    """

@pytest.fixture(scope='session')
def sample_html():
    """Return sample HTML content for testing."""
    return """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<title>Test Page</title>
<link rel="stylesheet" href="/styles.css">
</head>
<body>
<div class="container">
<header class="header"><h1>Test Page</h1></header>
<p>This is a regular paragraph.</p>
</div>
</body>
</html>
"""
