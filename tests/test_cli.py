import contextlib
import io
import logging
import os
import tempfile
import unittest
from pathlib import Path

from botocore.exceptions import ClientError, ProfileNotFound

from s3_sync import cli
from s3_sync.models import ListingPage, ObjectEntry


class FakeBucketService:
    def __init__(self, objects=None, list_error=None):
        self.objects = dict(objects or {})
        self.list_error = list_error
        self.created_with = []
        self.put_keys = []

    def __call__(self, bucket_name, config):
        self.created_with.append((bucket_name, config))
        return self

    def list(self, prefix="", delimiter="/"):
        if self.list_error is not None:
            raise self.list_error
        return ListingPage(entries=[ObjectEntry(key=k) for k in sorted(self.objects) if k.startswith(prefix)])

    def get(self, key):
        return io.BytesIO(self.objects[key])

    def put(self, key, body, content_type=None, acl=None):
        self.put_keys.append(key)
        self.objects[key] = body


class MainTests(unittest.TestCase):
    def tearDown(self):
        root = logging.getLogger()
        for handler in list(root.handlers):
            root.removeHandler(handler)

    def _run(self, argv, service):
        stdout, stderr = io.StringIO(), io.StringIO()
        with tempfile.TemporaryDirectory() as tmp:
            settings = str(Path(tmp) / "settings.json")
            with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
                code = cli.main(["--settings", settings, *argv], service_factory=service)
        return code, stdout.getvalue(), stderr.getvalue()

    def test_usage_error_exits_with_one(self):
        service = FakeBucketService()

        code, _out, err = self._run(["/a", "/b"], service)

        self.assertEqual(1, code)
        self.assertIn("either source or destination should begin with s3://", err)
        self.assertIn("usage:", err)
        self.assertEqual([], service.created_with)

    def test_upload_passes_profile_and_bucket_to_service(self):
        service = FakeBucketService()
        with tempfile.TemporaryDirectory() as tmp:
            (Path(tmp) / "a.txt").write_bytes(b"a")

            code, out, _err = self._run(
                ["--profile", "work", "--region", "eu-west-1", tmp, "s3://bucket/backup"],
                service,
            )

        self.assertEqual(0, code)
        self.assertEqual(["backup/a.txt"], service.put_keys)
        bucket_name, config = service.created_with[0]
        self.assertEqual("bucket", bucket_name)
        self.assertEqual("work", config.profile)
        self.assertEqual("eu-west-1", config.region)
        self.assertIn("-> 'backup/a.txt'", out)
        self.assertIn("1 file(s) uploaded", out)

    def test_dry_run_reports_without_transfers(self):
        service = FakeBucketService()
        with tempfile.TemporaryDirectory() as tmp:
            (Path(tmp) / "a.txt").write_bytes(b"a")

            code, out, _err = self._run(["--dry-run", tmp, "s3://bucket/backup"], service)

        self.assertEqual(0, code)
        self.assertEqual([], service.put_keys)
        self.assertIn("1 file(s) would be uploaded", out)

    def test_download_writes_files(self):
        service = FakeBucketService({"backup/a.txt": b"alpha"})
        with tempfile.TemporaryDirectory() as tmp:
            code, out, _err = self._run(["s3://bucket/backup/", tmp], service)

            self.assertEqual(b"alpha", (Path(tmp) / "a.txt").read_bytes())

        self.assertEqual(0, code)
        self.assertIn("download backup/a.txt ->", out)

    def test_missing_source_is_fatal(self):
        code, _out, err = self._run(["/definitely/not/here", "s3://bucket/k"], FakeBucketService())

        self.assertEqual(1, code)
        self.assertIn("not found", err)

    def test_remote_error_is_fatal(self):
        error = ClientError({"Error": {"Code": "NoSuchBucket", "Message": "missing"}}, "ListObjectsV2")
        with tempfile.TemporaryDirectory() as tmp:
            code, _out, err = self._run(["s3://bucket/k/", tmp], FakeBucketService(list_error=error))

        self.assertEqual(1, code)
        self.assertIn("NoSuchBucket", err)

    def test_upload_from_current_directory(self):
        service = FakeBucketService()
        with tempfile.TemporaryDirectory() as tmp:
            (Path(tmp) / "a.txt").write_bytes(b"a")
            previous = os.getcwd()
            os.chdir(tmp)
            try:
                code, out, _err = self._run([".", "s3://bucket/backup"], service)
            finally:
                os.chdir(previous)

        self.assertEqual(0, code)
        self.assertEqual(["backup/a.txt"], service.put_keys)
        self.assertIn("1 file(s) uploaded", out)

    def test_value_error_is_reported_on_one_line(self):
        service = FakeBucketService(list_error=ValueError("bad listing"))
        with tempfile.TemporaryDirectory() as tmp:
            code, _out, err = self._run(["s3://bucket/k/", tmp], service)

        self.assertEqual(1, code)
        self.assertEqual("bad listing\n", err)

    def test_unknown_profile_is_fatal(self):
        def factory(bucket_name, config):
            raise ProfileNotFound(profile=config.profile)

        with tempfile.TemporaryDirectory() as tmp:
            code, _out, err = self._run(["--profile", "ghost", "s3://bucket/k/", tmp], factory)

        self.assertEqual(1, code)
        self.assertIn("ghost", err)


if __name__ == "__main__":
    unittest.main()
