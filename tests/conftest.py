import pytest

from tidyfs.settings import Settings, SettingsStore


@pytest.fixture
def settings():
    """Default settings, never persisted."""
    return Settings()


@pytest.fixture
def store(tmp_path):
    """Returns a SettingsStore backed by a file in a temp config dir."""
    return SettingsStore(tmp_path / "config" / "config.json")


@pytest.fixture
def sample_tree(tmp_path):
    """
    root/
      doc.pdf, image.jpg, unknown.xyz
      subdir/subfile.txt
    """
    root = tmp_path / "root"
    root.mkdir()
    (root / "doc.pdf").write_text("pdf content")
    (root / "image.jpg").write_text("jpg content")
    (root / "unknown.xyz").write_text("unknown content")
    sub = root / "subdir"
    sub.mkdir()
    (sub / "subfile.txt").write_text("subfile content")
    return root
