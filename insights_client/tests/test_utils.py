import logging
import threading
import time

import pytest

from insights_client.logging import setup_logger
from insights_client.utils import ReadWriteLock, RetryError, redact_sensitive_data, retry


def test_redact_sensitive_data():
    data = {"ccx_token": "abc", "ccx_server": "http://ccx", "nested": [{"password": "pw"}], "empty_token": ""}

    assert redact_sensitive_data(data) == {
        "ccx_token": "[REDACTED]",
        "ccx_server": "http://ccx",
        "nested": [{"password": "[REDACTED]"}],
        "empty_token": "",
    }


def test_retry_succeeds_after_failures():
    calls = []
    sleeps = []

    @retry(max_retries=2, delay=0.5, exceptions=(ConnectionError,), sleep=sleeps.append)
    def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise ConnectionError("refused")
        return "ok"

    assert flaky() == "ok"
    assert sleeps == [0.5, 1.0]


def test_retry_does_not_catch_other_exceptions():
    @retry(max_retries=3, exceptions=(ConnectionError,), sleep=lambda _: None)
    def broken():
        raise ValueError("bad")

    with pytest.raises(ValueError):
        broken()


def test_retry_gives_up():
    @retry(max_retries=1, exceptions=(ConnectionError,), sleep=lambda _: None)
    def down():
        raise ConnectionError("refused")

    with pytest.raises(RetryError):
        down()


def test_readers_share_the_lock():
    lock = ReadWriteLock()
    inside = threading.Barrier(2, timeout=5)

    def reader():
        with lock.read_locked():
            inside.wait()

    threads = [threading.Thread(target=reader) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert not any(t.is_alive() for t in threads)


def test_writer_excludes_readers():
    lock = ReadWriteLock()
    events = []
    lock.acquire_write()

    def reader():
        with lock.read_locked():
            events.append("read")

    t = threading.Thread(target=reader)
    t.start()
    time.sleep(0.05)
    events.append("write done")
    lock.release_write()
    t.join(timeout=5)

    assert events == ["write done", "read"]


def test_setup_logger_accepts_level_names():
    logger = setup_logger("insights_client.tests.example", "debug")
    handlers = list(logger.handlers)

    assert logger.level == logging.DEBUG
    assert setup_logger("insights_client.tests.example", "debug").handlers == handlers
