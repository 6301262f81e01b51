import base64
import unittest
from unittest.mock import patch

import cloudinary
import cloudinary.exceptions

from relief_api.media import (
    CloudinaryMediaClient,
    InMemoryMediaClient,
    MediaUploadError,
    to_data_uri,
)


class CloudinaryMediaClientTests(unittest.TestCase):
    def setUp(self):
        self.client = CloudinaryMediaClient(
            cloud_name="demo", api_key="key", api_secret="shh", folder="weblearn"
        )

    def test_data_uri(self):
        uri = to_data_uri(b"abc", "image/jpeg")
        self.assertEqual(uri, "data:image/jpeg;base64," + base64.b64encode(b"abc").decode())
        self.assertTrue(to_data_uri(b"abc").startswith("data:image/png;base64,"))

    def test_client_configures_sdk(self):
        config = cloudinary.config()
        self.assertEqual(config.cloud_name, "demo")
        self.assertEqual(config.api_key, "key")
        self.assertEqual(config.api_secret, "shh")

    @patch("relief_api.media.cloudinary.uploader.upload")
    def test_upload_sends_data_uri(self, mock_upload):
        mock_upload.return_value = {"secure_url": "https://res.cloudinary.com/demo/x.png"}

        url = self.client.upload(b"bytes", "image/png")

        self.assertEqual(url, "https://res.cloudinary.com/demo/x.png")
        mock_upload.assert_called_once_with(
            to_data_uri(b"bytes", "image/png"),
            resource_type="auto",
            folder="weblearn",
            timeout=30,
        )

    @patch("relief_api.media.cloudinary.uploader.upload")
    def test_upstream_error_message_is_kept(self, mock_upload):
        mock_upload.side_effect = cloudinary.exceptions.Error("Invalid Signature")
        with self.assertRaises(MediaUploadError) as ctx:
            self.client.upload(b"bytes")
        self.assertEqual(str(ctx.exception), "Invalid Signature")

    @patch("relief_api.media.cloudinary.uploader.upload")
    def test_response_without_url(self, mock_upload):
        mock_upload.return_value = {"public_id": "weblearn/x"}
        with self.assertRaises(MediaUploadError):
            self.client.upload(b"bytes")


class InMemoryMediaClientTests(unittest.TestCase):
    def test_upload_keeps_bytes_under_folder(self):
        media = InMemoryMediaClient(folder="relief")
        url = media.upload(b"bytes", "image/gif")
        key = url.rsplit("/media/", 1)[1]
        self.assertTrue(key.startswith("relief/"))
        self.assertEqual(media.uploads[key], (b"bytes", "image/gif"))


if __name__ == "__main__":
    unittest.main()
