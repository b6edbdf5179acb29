import pytest

from ADALIGHT_DRIVER.transport import TransportResult


class FakeTransport:
    """
    Records every call as (operation, args) and answers from scripted
    failures: fail_open / fail_write / fail_close hold how many of the
    next calls of that kind should fail (or True for all of them).
    """

    def __init__(self):
        self.calls = []
        self.written = []
        self.fail_open = 0
        self.fail_write = 0
        self.fail_close = 0

    def _result(self, attribute):
        remaining = getattr(self, attribute)
        if remaining is True:
            return TransportResult.failure(OSError(f"{attribute} scripted"))
        if remaining:
            setattr(self, attribute, remaining - 1)
            return TransportResult.failure(OSError(f"{attribute} scripted"))
        return TransportResult.success()

    def open(self, port, baud_rate):
        self.calls.append(("open", (port, baud_rate)))
        return self._result("fail_open")

    def close(self):
        self.calls.append(("close", ()))
        return self._result("fail_close")

    def write(self, data):
        self.calls.append(("write", (data,)))
        result = self._result("fail_write")
        if result.ok:
            self.written.append(bytes(data))
        return result

    def operations(self):
        return [operation for operation, _ in self.calls]


class FakeClock:
    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def clock():
    return FakeClock()
