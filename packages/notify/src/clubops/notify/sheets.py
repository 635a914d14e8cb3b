"""外部报名表格读取

把 Google 表格分享链接改写为 CSV 导出地址，下载后解析为 TabularSource。
表格必须已公开发布（或 "知道链接的任何人可查看"），否则导出接口返回非 2xx。
"""

import csv
import io
import re

import httpx
import structlog

from clubops.core.models import TabularSource

from .exceptions import SheetFetchError

log = structlog.get_logger()

_SHEET_ID_PATTERN = re.compile(r"/d/([a-zA-Z0-9\-_]+)")
_EDIT_SUFFIX_PATTERN = re.compile(r"/edit.*$")
_EXPORT_URL = "https://docs.google.com/spreadsheets/d/{sheet_id}/export?format=csv"


def normalize_sheet_url(url: str) -> str:
    """分享链接 -> CSV 导出地址

    1. 包含 /d/<id> 时改写为该 id 的导出地址
    2. 否则包含 /edit 时把 /edit 及之后部分替换为 /export?format=csv
    3. 否则原样返回
    """
    url = url.strip()
    if match := _SHEET_ID_PATTERN.search(url):
        return _EXPORT_URL.format(sheet_id=match.group(1))
    if "/edit" in url:
        return _EDIT_SUFFIX_PATTERN.sub("/export?format=csv", url)
    return url


def parse_csv(text: str) -> TabularSource:
    """解析 CSV 文本：首个非空行为表头，空行丢弃，单元格去引号和首尾空白"""
    reader = csv.reader(io.StringIO(text))
    lines = [
        [cell.replace('"', "").strip() for cell in row]
        for row in reader
        if any(cell.strip() for cell in row)
    ]
    if not lines:
        return TabularSource()
    return TabularSource(headers=lines[0], rows=lines[1:])


class SheetFetcher:
    """表格下载器"""

    def __init__(
        self,
        timeout_s: int = 15,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=timeout_s, follow_redirects=True
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def fetch(self, sheet_url: str) -> TabularSource:
        """下载并解析表格

        Raises:
            SheetFetchError: 网络错误或非 2xx 响应
        """
        export_url = normalize_sheet_url(sheet_url)
        try:
            resp = await self._client.get(export_url)
        except httpx.HTTPError as e:
            log.warning("sheet_fetch_failed", error=str(e), error_type=type(e).__name__)
            raise SheetFetchError(export_url, original_error=e) from e

        if not resp.is_success:
            log.warning("sheet_fetch_rejected", status_code=resp.status_code)
            raise SheetFetchError(export_url, status_code=resp.status_code)

        table = parse_csv(resp.text)
        log.info(
            "sheet_fetched",
            header_count=len(table.headers),
            row_count=len(table.rows),
        )
        return table
