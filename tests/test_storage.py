from minio.error import S3Error

from invoice_engine.services.storage_service import MinIOStorageService


def _s3_error(code):
    return S3Error(
        response=None, code=code, message="test", resource="/generated-invoices",
        request_id="1", host_id="1",
    )


class FakeMinio:
    def __init__(self, buckets=()):
        self.buckets = set(buckets)
        self.objects = {}

    def bucket_exists(self, bucket_name):
        return bucket_name in self.buckets

    def make_bucket(self, bucket_name):
        self.buckets.add(bucket_name)

    def put_object(self, bucket_name, object_name, data, length, content_type):
        assert content_type == "application/pdf"
        self.objects[(bucket_name, object_name)] = data.read(length)

    def stat_object(self, bucket_name, object_name):
        if (bucket_name, object_name) not in self.objects:
            raise _s3_error("NoSuchKey")
        return object_name


def test_bucket_is_created_on_start():
    client = FakeMinio()
    MinIOStorageService(client=client, bucket_name="generated-invoices")
    assert client.buckets == {"generated-invoices"}


def test_upload_pdf():
    client = FakeMinio(buckets=["generated-invoices"])
    archive = MinIOStorageService(client=client, bucket_name="generated-invoices")

    path = archive.upload_pdf("Invoice-INV-2025-00001-20250401093015.pdf", b"%PDF-1.4 test")

    assert path == "generated-invoices/Invoice-INV-2025-00001-20250401093015.pdf"
    assert client.objects[("generated-invoices", "Invoice-INV-2025-00001-20250401093015.pdf")] == b"%PDF-1.4 test"


def test_object_exists():
    client = FakeMinio(buckets=["generated-invoices"])
    archive = MinIOStorageService(client=client, bucket_name="generated-invoices")
    archive.upload_pdf("Invoice-INV-2025-00001.pdf", b"%PDF-1.4 test")

    assert archive.object_exists("Invoice-INV-2025-00001.pdf")
    assert not archive.object_exists("Invoice-INV-2025-00002.pdf")
