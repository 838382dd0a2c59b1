import unittest
from unittest import mock

from keyring.errors import KeyringError, PasswordDeleteError

from s3_file_manager.credentials import KeychainStore


class KeychainStoreTests(unittest.TestCase):
    def setUp(self):
        patcher = mock.patch("s3_file_manager.credentials.keyring")
        self.keyring = patcher.start()
        self.addCleanup(patcher.stop)
        self.store = KeychainStore(service_name="tests")

    def test_get_secret(self):
        self.keyring.get_password.return_value = "secret"

        self.assertEqual("secret", self.store.get_secret("AK"))
        self.keyring.get_password.assert_called_once_with("tests", "AK")

    def test_get_secret_without_entry(self):
        self.keyring.get_password.return_value = None

        self.assertEqual("", self.store.get_secret("AK"))

    def test_get_secret_logs_keychain_errors(self):
        self.keyring.get_password.side_effect = KeyringError("locked")

        with self.assertLogs("s3_file_manager.credentials", level="WARNING"):
            self.assertEqual("", self.store.get_secret("AK"))

    def test_blank_access_key_skips_keychain(self):
        self.assertEqual("", self.store.get_secret(""))
        self.keyring.get_password.assert_not_called()

    def test_set_secret(self):
        self.store.set_secret("AK", "secret")

        self.keyring.set_password.assert_called_once_with("tests", "AK", "secret")

    def test_empty_secret_deletes_entry(self):
        self.keyring.delete_password.side_effect = PasswordDeleteError("missing")

        self.store.set_secret("AK", "")

        self.keyring.delete_password.assert_called_once_with("tests", "AK")
        self.keyring.set_password.assert_not_called()


if __name__ == "__main__":
    unittest.main()
