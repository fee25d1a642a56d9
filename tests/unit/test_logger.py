import logging

from app.logging.logger import _ContextFormatter


def _make_record(**context: object) -> logging.LogRecord:
    record = logging.LogRecord("proofshare", logging.INFO, __file__, 1, "Stored file", None, None)
    for key, value in context.items():
        setattr(record, key, value)
    return record


class TestContextFormatter:
    def test_plain_message_is_unchanged(self) -> None:
        formatter = _ContextFormatter("%(message)s")
        assert formatter.format(_make_record()) == "Stored file"

    def test_context_is_appended_sorted(self) -> None:
        formatter = _ContextFormatter("%(message)s")
        line = formatter.format(_make_record(locator="loc", digest="abc"))
        assert line == "Stored file | digest=abc locator=loc"
