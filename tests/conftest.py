import pytest


@pytest.fixture(autouse=True)
def isolate_working_directory(tmp_path, monkeypatch):
    """Run every test from an empty directory.

    The tool reads ``.clog.toml`` from the current directory, so a
    configuration file in the checkout must not leak into the tests.
    """
    monkeypatch.chdir(tmp_path)
    yield
