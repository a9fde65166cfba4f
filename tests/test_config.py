import pytest

from ssfs.daemon.utils.config_loader import ConfigLoader, Settings


def _loader(tmp_path, text=None):
    loader = ConfigLoader()
    loader.config_file = tmp_path / "ssfs.yaml"
    if text is not None:
        loader.config_file.write_text(text)
    return loader


class TestSettings:
    def test_defaults(self, tmp_path):
        settings = _loader(tmp_path).load_settings(environ={})
        assert settings.cost_per_unit == 2
        assert settings.bucket_name == "ssfs-bucket"
        assert settings.service_name == "ssfs-ethan-oct16"
        assert settings.internal_routing == "ssfs-internal"
        assert settings.callback_url is None
        assert settings.debug_logs_on is False

    def test_env_overrides_file(self, tmp_path):
        loader = _loader(tmp_path, "bucket_name: from-file\ncost_per_unit: 3\n")
        settings = loader.load_settings(
            environ={
                "SSFS_BUCKET_NAME": "from-env",
                "SSFS_SERVICE_CALLBACK_URL": "https://processor.example/hook",
                "debug_logs_on": "true",
            }
        )
        assert settings.bucket_name == "from-env"
        assert settings.cost_per_unit == 3
        assert settings.callback_url == "https://processor.example/hook"
        assert settings.debug_logs_on is True

    def test_debug_flag_only_true_string(self, tmp_path):
        settings = _loader(tmp_path).load_settings(environ={"debug_logs_on": "1"})
        assert settings.debug_logs_on is False

    def test_api_key_field_from_env(self, tmp_path):
        settings = _loader(tmp_path).load_settings(environ={"SSFS_API_KEY_FIELD": "partner_key"})
        assert settings.api_key_field == "partner_key"

    def test_blank_api_key_field_rejected(self):
        with pytest.raises(ValueError):
            Settings(api_key_field="")

    def test_blank_callback_is_none(self):
        assert Settings(callback_url="  ").callback_url is None

    def test_non_http_callback_rejected(self):
        with pytest.raises(ValueError):
            Settings(callback_url="ftp://example")


class TestAtomicReload:
    def test_invalid_reload_keeps_previous(self, tmp_path):
        loader = _loader(tmp_path, "bucket_name: original\n")
        loader.load_settings(environ={})

        loader.config_file.write_text("cost_per_unit: 0\n")
        with pytest.raises(ValueError, match="previous config retained"):
            loader.load_settings(environ={})

        assert loader.settings.bucket_name == "original"

    def test_invalid_without_fallback(self, tmp_path):
        loader = _loader(tmp_path, "this is not valid yaml: [[[")
        with pytest.raises(ValueError, match="no fallback"):
            loader.load_settings(environ={})
        assert loader.settings is None
