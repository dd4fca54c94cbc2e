from scripts import check_env
from scripts.check_env import _display


def test_secrets_are_masked():
    assert _display("SECRET_KEY", "abc") == "<hidden>"
    assert _display("SUPABASE_SERVICE_ROLE_KEY", "abc") == "<hidden>"
    assert _display("SUPABASE_SERVICE_ROLE_KEY", None) == "None"
    assert _display("STORAGE_BUCKET", "curriculum-images") == "curriculum-images"


def test_main_warns_about_missing_storage(monkeypatch, capsys):
    from app.core.config import settings

    monkeypatch.setattr(settings, "SUPABASE_URL", None)
    assert check_env.main() == 0
    out = capsys.readouterr().out
    assert "Environment variables OK." in out
    assert "storage is not configured" in out
    assert "secret-key" not in out
