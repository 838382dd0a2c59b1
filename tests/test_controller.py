import io
import os
import unittest
from unittest import mock

import httpx
from fakes import FakeS3Client

from s3_file_manager.config import ConfigurationError, StorageSettings
from s3_file_manager.controller import NotConnectedError, S3FileManagerController
from s3_file_manager.models import OperationType, UploadFile, UploadStatus
from s3_file_manager.settings import MemorySettingsStorage, SessionState


class S3FileManagerControllerTests(unittest.TestCase):
    def setUp(self):
        patcher = mock.patch.dict(os.environ, {}, clear=True)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.client = FakeS3Client(["docs/a.txt", "docs/sub/b.txt", "root.txt"])
        self.factory_calls = []
        self.uploads = []

    def client_factory(self, service, **kwargs):
        self.factory_calls.append((service, kwargs))
        return self.client

    def handler(self, request):
        body = request.read()
        key = request.url.path.lstrip("/")
        self.uploads.append(key)
        self.client.add(key, body)
        return httpx.Response(200)

    def settings(self, **overrides):
        values = {
            "access_key_id": "AK",
            "secret_access_key": "SK",
            "bucket_name": "bucket",
            "file_upload_limit": 100,
        }
        values.update(overrides)
        return StorageSettings(_env_file=None, **values)

    def make_controller(self, path=""):
        http_client = httpx.Client(transport=httpx.MockTransport(self.handler))
        self.addCleanup(http_client.close)
        return S3FileManagerController(
            self.settings(),
            client_factory=self.client_factory,
            session_storage=MemorySettingsStorage(SessionState(last_path=path)),
            http_client=http_client,
        )

    def test_requires_connection(self):
        controller = self.make_controller()

        self.assertFalse(controller.is_connected)
        with self.assertRaises(NotConnectedError):
            controller.get_objects("docs/")
        with self.assertRaises(NotConnectedError):
            controller.generate_read_url("docs/a.txt")
        self.assertIsNone(controller.operation_message)

    def test_connect_rejects_incomplete_settings(self):
        controller = S3FileManagerController(
            self.settings(bucket_name=""), client_factory=self.client_factory
        )

        with self.assertRaises(ConfigurationError):
            controller.connect()
        self.assertEqual([], self.factory_calls)
        self.assertFalse(controller.is_connected)

    def test_connect_loads_last_path(self):
        controller = self.make_controller("docs/")

        result = controller.connect()

        self.assertTrue(result.success)
        self.assertTrue(controller.is_connected)
        self.assertEqual("docs/", controller.current_path)
        self.assertEqual({"docs/a.txt", "docs/sub/"}, {obj.key for obj in controller.objects})
        self.assertEqual("s3", self.factory_calls[0][0])

    def test_navigation_round_trip(self):
        controller = self.make_controller()
        controller.connect()

        controller.get_objects("docs/sub/")
        self.assertEqual(["docs/sub/b.txt"], [obj.key for obj in controller.objects])
        controller.to_parent_directory()
        self.assertEqual("docs/", controller.current_path)
        self.assertEqual("sub", controller.sorted_objects(reset=True)[0].name)

    def test_create_directory_in_current_path(self):
        controller = self.make_controller("docs/")
        controller.connect()

        self.assertTrue(controller.begin_create().success)
        result = controller.create_directory("new")

        self.assertTrue(result.success)
        self.assertIn("docs/new/", self.client.objects)
        self.assertIsNotNone(controller.get_object_from_key("docs/new/"))

    def test_copy_into_current_path(self):
        controller = self.make_controller("docs/sub/")
        controller.connect()

        controller.set_operation_context("root.txt", OperationType.COPY)
        result = controller.copy_object()

        self.assertTrue(result.success)
        self.assertIn("docs/sub/root.txt", self.client.objects)

    def test_reset_operation(self):
        controller = self.make_controller()
        controller.connect()
        controller.set_operation_context("root.txt", OperationType.DELETE)

        controller.reset_operation()

        self.assertIsNone(controller.orchestrator.source_key)

    def test_select_files_validates_size_limit(self):
        controller = self.make_controller()
        controller.connect()
        big = UploadFile(name="big.bin", size=500, opener=lambda: io.BytesIO(b"x" * 500))

        result = controller.select_files([big])

        self.assertFalse(result.success)
        self.assertEqual("1 file(s) exceed the maximum allowed size (100 B)", result.message)

    def test_upload_batch_reports_progress(self):
        controller = self.make_controller("docs/")
        controller.connect()
        data = b"payload"
        controller.select_files([UploadFile(name="new.txt", size=len(data), opener=lambda: io.BytesIO(data))])
        progress = []

        summary = controller.upload_batch(on_progress=progress.append)

        self.assertEqual(1, summary.success_count)
        self.assertEqual(["docs/new.txt"], self.uploads)
        self.assertEqual([100], progress)
        self.assertEqual([UploadStatus.COMPLETED], [task.status for task in controller.upload_statuses()])
        self.assertIsNone(controller.uploads.on_progress)

    def test_public_url_strips_signature(self):
        controller = self.make_controller()
        controller.connect()

        result = controller.public_url("docs/a.txt")

        self.assertEqual("https://bucket.example/docs/a.txt", result.data)

    def test_object_details(self):
        controller = self.make_controller()
        controller.connect()

        result = controller.get_object_details("docs/a.txt")

        self.assertEqual("docs/a.txt", result.data.key)
        self.assertEqual("4 B", result.data.readable_size)
        self.assertEqual("2024-01-02 03:04:05 UTC", result.data.last_modified_text)

    def test_read_url_lifetime_follows_settings(self):
        controller = S3FileManagerController(self.settings(signed_url_expires=5400))

        self.assertEqual("01:30:00", controller.read_url_lifetime)
        self.assertIsNone(S3FileManagerController().read_url_lifetime)

    def test_close_disconnects(self):
        controller = self.make_controller()
        controller.connect()

        controller.close()

        self.assertFalse(controller.is_connected)


if __name__ == "__main__":
    unittest.main()
