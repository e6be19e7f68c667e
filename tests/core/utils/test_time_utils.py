import re
from datetime import datetime, timezone

from file_manager.core.utils.time import utc_now_compact, utc_now_iso


class TestUtcNowIso:
    def test_returns_string(self) -> None:
        result = utc_now_iso()
        assert isinstance(result, str)

    def test_returns_utc_timezone(self) -> None:
        result = utc_now_iso()
        parsed = datetime.fromisoformat(result)
        assert parsed.tzinfo == timezone.utc

    def test_is_close_to_current_time(self) -> None:
        before = datetime.now(timezone.utc)
        result = utc_now_iso()
        after = datetime.now(timezone.utc)

        parsed = datetime.fromisoformat(result)
        assert before <= parsed <= after


class TestUtcNowCompact:
    def test_format(self) -> None:
        assert re.fullmatch(r"\d{8}-\d{6}", utc_now_compact())
