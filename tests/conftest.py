"""Shared test fixtures and configuration."""

import os
import tempfile

import pytest

# Keep snapshot files out of the working tree
os.environ.setdefault("CACHE_DIR", tempfile.mkdtemp(prefix="opendata-cache-tests-"))
os.environ.setdefault("MOENV_API_KEY", "test-key")

from app.config import Settings  # noqa: E402
from helpers import FakeClock  # noqa: E402


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def test_settings(tmp_path):
    return Settings(cache_dir=str(tmp_path / "cache"), moenv_api_key="test-key")


@pytest.fixture
def sample_news_items():
    """Sample HPA news API response (mixed years, one bad date)."""
    return [
        {
            "標題": "國健署提醒民眾注意高血壓",
            "內容": "高血壓是常見慢性病，建議定期量測血壓。",
            "發布日期": "2025/03/01 10:00:00",
            "修改日期": "2025/03/02 09:00:00",
        },
        {
            "標題": "戒菸專線服務升級",
            "內容": "提供更便利的戒菸諮詢服務。",
            "發布日期": "2025-07-15",
            "修改日期": "2025-07-15",
        },
        {
            "標題": "去年的健康宣導",
            "內容": "2024 年活動回顧。",
            "發布日期": "2024/12/31",
            "修改日期": "2025/01/05",
        },
        {
            "標題": "日期格式錯誤的新聞",
            "內容": "無法解析。",
            "發布日期": "not-a-date",
        },
    ]


@pytest.fixture
def sample_restaurant_response():
    """Sample MOENV gis_p_11 response."""
    return {
        "fields": [{"id": "name"}, {"id": "city"}, {"id": "address"}],
        "records": [
            {"name": "Green Bowl", "city": "臺北市", "address": "臺北市中正區忠孝西路1號"},
            {"name": "Veggie House", "city": "臺北市", "address": "臺北市大安區復興南路2號"},
            {"name": "Harbour Salad", "city": "高雄市", "address": "高雄市前鎮區成功二路3號"},
        ],
    }
