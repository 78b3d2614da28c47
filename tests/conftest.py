from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

import pytest
from omegaconf import DictConfig

from better_nh_energy.common.http_adapter import HttpResult
from better_nh_energy.config.config import load_config

DATA_DIR = Path(__file__).parent / "sources" / "nh_ceps" / "data"


class FakeAdapter:
    """Stand-in for HttpRequestsAdapter that serves canned pages per provider.

    ``pages`` maps a provider choice to HTML text or to an exception to raise.
    """

    def __init__(self, pages: dict[str, str | Exception]) -> None:
        self._pages = pages
        self.calls: list[dict[str, object]] = []
        self.closed = False

    def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        params: Optional[dict[str, str]] = None,
        headers: Optional[dict[str, str]] = None,
        timeout: Optional[float] = None,
        allow_redirects: bool = True,
    ) -> HttpResult:
        _ = (method, headers, allow_redirects)
        self.calls.append({"url": url, "params": dict(params or {}), "timeout": timeout})
        choice = (params or {}).get("choice", "")
        page = self._pages[choice]
        if isinstance(page, Exception):
            raise page
        return HttpResult(
            data=page.encode("utf-8"),
            status=200,
            url=f"{url}?choice={choice}",
            content_type="text/html; charset=utf-8",
            encoding="utf-8",
        )

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def sample_html() -> str:
    return (DATA_DIR / "sample_compare.html").read_text(encoding="utf-8")


@pytest.fixture
def make_cfg(tmp_path: Path) -> Callable[..., DictConfig]:
    """Config rooted in tmp_path with a single, no-wait fetch attempt."""

    def _make(*extra: str) -> DictConfig:
        return load_config(
            overrides=[
                f"paths.data_root={tmp_path / 'out'}",
                f"sources.nh_ceps.logs_dir={tmp_path / 'logs'}",
                "sources.nh_ceps.retry.attempts=1",
                "sources.nh_ceps.retry.wait_seconds=0",
                "sources.nh_ceps.retry.max_wait_seconds=0",
                *extra,
            ]
        )

    return _make
