import importlib
import json

from auth import jwt as jwt_lib


def test_defaults_when_config_missing(tmp_path, monkeypatch):
    monkeypatch.delenv("JWT_SECRET", raising=False)
    monkeypatch.setenv("AUTH_CONFIG_PATH", str(tmp_path / "missing.json"))
    import auth.config as auth_config
    importlib.reload(auth_config)
    try:
        assert auth_config.get_jwt_secret() == "change-me"
        assert auth_config.get_jwt_expires_seconds() == 604800
        emails = {u["email"] for u in auth_config.get_users()}
        assert emails == {"user@example.com", "admin@example.com"}
        assert auth_config.check_credentials("user@example.com", "password123")["id"] == "1"
    finally:
        monkeypatch.undo()
        importlib.reload(auth_config)


def test_invalid_config_file_falls_back(tmp_path, monkeypatch):
    cfg_path = tmp_path / "auth.json"
    cfg_path.write_text("{not json", encoding="utf-8")
    monkeypatch.delenv("JWT_SECRET", raising=False)
    monkeypatch.setenv("AUTH_CONFIG_PATH", str(cfg_path))
    import auth.config as auth_config
    importlib.reload(auth_config)
    try:
        assert auth_config.get_jwt_secret() == "change-me"
        assert len(auth_config.get_users()) == 2
    finally:
        monkeypatch.undo()
        importlib.reload(auth_config)


def test_env_secret_wins(auth_cfg, monkeypatch):
    auth_config = auth_cfg({"jwt_secret": "file-secret"})
    assert auth_config.get_jwt_secret() == "file-secret"

    monkeypatch.setenv("JWT_SECRET", "env-secret")
    importlib.reload(auth_config)
    assert auth_config.get_jwt_secret() == "env-secret"
    snap = auth_config.get_effective_config_snapshot()
    assert snap["jwt_secret_from_env"] is True


def test_codec_follows_config(auth_cfg):
    auth_config = auth_cfg({"jwt_secret": "s1", "jwt_expires_seconds": 60, "jwt_signer": "rolling-hash"})
    codec = auth_config.get_token_codec()
    token = codec.generate({"userId": "1", "email": "e"})
    claims = codec.verify(token)
    assert claims["exp"] - claims["iat"] == 60

    header_b64, claims_b64, signature = token.split(".")
    assert signature == jwt_lib.rolling_hash(f"{header_b64}.{claims_b64}.s1")
    assert jwt_lib.TokenCodec("s1").verify(token) is None


def test_invalid_settings_fall_back(auth_cfg):
    auth_config = auth_cfg({"jwt_secret": "s", "jwt_expires_seconds": "soon", "jwt_signer": "md5"})
    assert auth_config.get_jwt_expires_seconds() == 604800
    assert auth_config.get_effective_config_snapshot()["jwt_signer"] == "hmac-sha256"


def test_check_credentials_hash_and_plaintext(auth_cfg):
    import auth.config as auth_config
    users = [
        {"id": "7", "email": "hashed@example.com", "name": "H", "password_hash": auth_config.hash_password("pw-1")},
        {"id": "8", "email": "plain@example.com", "name": "P", "password": "pw-2"},
        {"id": "9", "email": "nopw@example.com", "name": "N"},
    ]
    auth_config = auth_cfg({"jwt_secret": "s", "users": users})

    assert auth_config.check_credentials("hashed@example.com", "pw-1")["id"] == "7"
    assert auth_config.check_credentials("hashed@example.com", "wrong") is None
    assert auth_config.check_credentials("plain@example.com", "pw-2")["id"] == "8"
    assert auth_config.check_credentials("plain@example.com", "") is None
    assert auth_config.check_credentials("nopw@example.com", "") is None
    assert auth_config.check_credentials("nobody@example.com", "pw-2") is None


def test_find_user_by_id_accepts_ints(auth_cfg):
    auth_config = auth_cfg({"jwt_secret": "s", "users": [{"id": 3, "email": "n@example.com", "password": "x"}]})
    assert auth_config.find_user_by_id("3")["email"] == "n@example.com"
    assert auth_config.find_user_by_id(3)["email"] == "n@example.com"
    assert auth_config.find_user_by_id(None) is None
    assert auth_config.public_user(auth_config.find_user_by_id(3)) == {"id": "3", "email": "n@example.com", "name": None}


def test_snapshot_hides_secrets(auth_cfg, tmp_path):
    auth_config = auth_cfg({"jwt_secret": "top-secret", "users": [{"id": "1", "email": "a@b.c", "password": "pw"}]})
    snap = auth_config.get_effective_config_snapshot()
    text = json.dumps(snap)
    assert "top-secret" not in text
    assert "pw" not in json.dumps(snap["users"])
    assert snap["config_path"] == str(tmp_path / "auth.json")


def test_hash_password():
    import auth.config as auth_config
    assert auth_config.hash_password("") == ""
    assert auth_config.hash_password("x") == auth_config.hash_password("x")
    assert auth_config.verify_password("x", auth_config.hash_password("x"))
    assert not auth_config.verify_password("y", auth_config.hash_password("x"))


def test_secret_is_fixed_at_load(auth_cfg, monkeypatch):
    auth_config = auth_cfg({"jwt_secret": "file-secret"})
    monkeypatch.setenv("JWT_SECRET", "late-secret")

    assert auth_config.get_jwt_secret() == "file-secret"
    token = auth_config.get_token_codec().generate({"userId": "1", "email": "e"})
    assert jwt_lib.TokenCodec(auth_config.get_jwt_secret()).verify(token) is not None
    assert auth_config.get_effective_config_snapshot()["jwt_secret_from_env"] is False


def test_users_without_email_are_skipped(auth_cfg):
    users = [
        {"id": "1", "email": "ok@example.com", "password": "pw"},
        {"id": "2", "password": "pw"},
        {"id": "3", "email": 3, "password": "pw"},
        {"id": "4", "email": "", "password": "pw"},
        "not-a-user",
    ]
    auth_config = auth_cfg({"jwt_secret": "s", "users": users})
    assert [u["id"] for u in auth_config.get_users()] == ["1"]
    assert auth_config.find_user_by_id("2") is None


def test_public_user_drops_non_string_name(auth_cfg):
    auth_config = auth_cfg({"jwt_secret": "s", "users": [{"id": 1, "email": "a@b.c", "name": 7}]})
    assert auth_config.public_user(auth_config.find_user_by_id(1)) == {"id": "1", "email": "a@b.c", "name": None}
