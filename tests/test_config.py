import logging
import os
import unittest
from unittest import mock

from s3_file_manager.config import (
    ConfigurationError,
    StorageSettings,
    configure_logging,
    load_settings,
)


class FakeKeychain:
    def __init__(self, secrets=None):
        self.secrets = secrets or {}
        self.lookups = []

    def get_secret(self, access_key_id):
        self.lookups.append(access_key_id)
        return self.secrets.get(access_key_id, "")


class StorageSettingsTests(unittest.TestCase):
    def setUp(self):
        patcher = mock.patch.dict(os.environ, {}, clear=True)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_reads_environment_variables(self):
        os.environ.update(
            {
                "S3_ACCESS_KEY_ID": "AK",
                "S3_SECRET_ACCESS_KEY": "SK",
                "S3_BUCKET_NAME": "bucket",
                "S3_ENDPOINT_URL": "http://localhost:9000",
                "S3_REGION": "eu-west-1",
                "S3_FORCE_PATH_STYLE": "false",
                "S3_FILE_UPLOAD_LIMIT": "1048576",
                "S3_SIGNED_URL_EXPIRES": "60",
                "S3_UPLOAD_TIMEOUT": "30",
                "SIGNING_SERVICE_URL": "https://sign.example",
                "LOG_LEVEL": "debug",
            }
        )

        settings = StorageSettings(_env_file=None)

        self.assertEqual("AK", settings.access_key_id)
        self.assertEqual("SK", settings.secret_access_key)
        self.assertEqual("bucket", settings.bucket_name)
        self.assertEqual("http://localhost:9000", settings.endpoint_url)
        self.assertEqual("eu-west-1", settings.region)
        self.assertFalse(settings.force_path_style)
        self.assertEqual(1048576, settings.file_upload_limit)
        self.assertEqual(60, settings.signed_url_expires)
        self.assertEqual(30.0, settings.upload_timeout)
        self.assertEqual("https://sign.example", settings.signing_service_url)
        self.assertEqual("debug", settings.log_level)

    def test_defaults(self):
        settings = StorageSettings(_env_file=None)

        self.assertEqual("us-east-1", settings.region)
        self.assertTrue(settings.force_path_style)
        self.assertIsNone(settings.endpoint_url)
        self.assertIsNone(settings.file_upload_limit)
        self.assertEqual(900, settings.signed_url_expires)
        self.assertEqual("INFO", settings.log_level)

    def test_invalid_numbers_fall_back(self):
        os.environ.update(
            {
                "S3_FILE_UPLOAD_LIMIT": "lots",
                "S3_SIGNED_URL_EXPIRES": "-5",
                "S3_ENDPOINT_URL": "  ",
            }
        )

        settings = StorageSettings(_env_file=None)

        self.assertIsNone(settings.file_upload_limit)
        self.assertEqual(900, settings.signed_url_expires)
        self.assertIsNone(settings.endpoint_url)

    def test_reports_every_missing_value(self):
        settings = StorageSettings(_env_file=None)

        with self.assertRaises(ConfigurationError) as ctx:
            settings.validate_required()

        message = str(ctx.exception)
        self.assertIn("Missing S3 Access Key ID", message)
        self.assertIn("Missing S3 Secret Access Key", message)
        self.assertIn("Missing S3 Bucket Name", message)

    def test_secret_falls_back_to_keychain(self):
        keychain = FakeKeychain({"AK": "from-keychain"})

        settings = load_settings(keychain, _env_file=None, access_key_id="AK", bucket_name="bucket")

        self.assertEqual("from-keychain", settings.secret_access_key)
        self.assertEqual(["AK"], keychain.lookups)

    def test_explicit_secret_skips_keychain(self):
        keychain = FakeKeychain({"AK": "from-keychain"})

        settings = load_settings(
            keychain,
            _env_file=None,
            access_key_id="AK",
            secret_access_key="SK",
            bucket_name="bucket",
        )

        self.assertEqual("SK", settings.secret_access_key)
        self.assertEqual([], keychain.lookups)

    def test_load_settings_fails_without_secret(self):
        with self.assertRaises(ConfigurationError):
            load_settings(FakeKeychain(), _env_file=None, access_key_id="AK", bucket_name="bucket")

    def test_configure_logging_applies_level(self):
        os.environ["LOG_LEVEL"] = "warning"
        settings = StorageSettings(_env_file=None)

        with mock.patch("s3_file_manager.config.logging.basicConfig") as basic_config:
            configure_logging(settings)

        self.assertEqual(logging.WARNING, basic_config.call_args.kwargs["level"])

    def test_configure_logging_defaults_unknown_level(self):
        os.environ["LOG_LEVEL"] = "chatty"
        settings = StorageSettings(_env_file=None)

        with mock.patch("s3_file_manager.config.logging.basicConfig") as basic_config:
            configure_logging(settings)

        self.assertEqual(logging.INFO, basic_config.call_args.kwargs["level"])


if __name__ == "__main__":
    unittest.main()
