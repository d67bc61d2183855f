"""Integration tests for the one-shot build command."""
import pytest

from regdomain.config import Settings
from regdomain.suffix.index import build_index
from regdomain.worker import main as build_command
from regdomain.worker.refresh import PSLDownloadError


@pytest.fixture
def isolated_settings(tmp_path, monkeypatch):
    settings = Settings(index_path=str(tmp_path / "data" / "psl-index.bin"))
    monkeypatch.setattr(build_command, "settings", settings)
    monkeypatch.setattr(build_command, "setup_logging", lambda: None)
    return settings


class TestBuildCommand:
    """Test exit codes of the build command."""
    
    def test_success(self, isolated_settings, monkeypatch):
        seen = []
        
        def fake_refresh(settings):
            seen.append(settings)
            return build_index([])
        
        monkeypatch.setattr(build_command, "refresh_index", fake_refresh)
        
        assert build_command.main() == 0
        assert seen == [isolated_settings]
    
    def test_download_failure(self, isolated_settings, monkeypatch):
        def failing_refresh(settings):
            raise PSLDownloadError("PSL download failed with HTTP 503")
        
        monkeypatch.setattr(build_command, "refresh_index", failing_refresh)
        
        assert build_command.main() == 1
