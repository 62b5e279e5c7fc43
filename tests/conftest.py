import pytest

from spout2gelf.identity import ProcessIdentity


@pytest.fixture
def identity():
    return ProcessIdentity(hostname="rancher-host-1")


@pytest.fixture
def fake_hostname(monkeypatch):
    monkeypatch.setattr("socket.gethostname", lambda: "logspout-1")
    return "logspout-1"
