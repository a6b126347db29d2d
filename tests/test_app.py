import io
import pickle

import pytest

from app import app
from huffman import huffman_decoding, unpack_bits

TEXT = "to be or not to be, that is the question\nwhether 'tis nobler in the mind to suffer\n"


@pytest.fixture
def client(tmp_path):
    app.config["TESTING"] = True
    app.config["UPLOAD_DIR"] = str(tmp_path)
    with app.test_client() as client:
        yield client


def upload(client, route, data, filename):
    return client.post(
        route,
        data={"file": (io.BytesIO(data), filename)},
        content_type="multipart/form-data",
    )


def test_home(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "/compress_file" in response.get_json()["endpoints"]


def test_encode_endpoint(client):
    response = client.post("/api/encode", json={"text": TEXT})
    assert response.status_code == 200

    body = response.get_json()
    assert body["success"]
    bits = unpack_bits(bytes.fromhex(body["data"]), body["bit_length"])
    assert huffman_decoding(bits, body["codes"]) == TEXT
    assert (body["bit_length"] + body["padding_bits"]) % 8 == 0


def test_encode_endpoint_empty_text(client):
    body = client.post("/api/encode", json={"text": ""}).get_json()
    assert body["success"]
    assert body["codes"] == {}
    assert body["data"] == ""


def test_encode_endpoint_requires_text(client):
    assert client.post("/api/encode", json={"words": TEXT}).status_code == 400
    assert client.post("/api/encode", json=["not", "an", "object"]).status_code == 400


def test_compress_and_download(client):
    response = upload(client, "/compress_file", TEXT.encode("utf-8"), "hamlet.txt")
    assert response.status_code == 200

    body = response.get_json()
    assert body["success"]
    assert body["filename"] == "hamlet.txt"
    assert body["original_size"] == len(TEXT.encode("utf-8"))

    compressed = client.get(body["download_compressed_url"])
    assert compressed.status_code == 200
    assert len(compressed.data) == body["compressed_size"]

    codes = client.get(body["download_codes_url"])
    assert codes.status_code == 200
    assert b"=question), " in codes.data


def test_compress_then_decompress(client):
    body = upload(client, "/compress_file", TEXT.encode("utf-8"), "hamlet.txt").get_json()
    archive = client.get(body["download_archive_url"]).data

    response = upload(client, "/decompress_file", archive, "hamlet.txt.huff")
    assert response.status_code == 200

    result = response.get_json()
    assert result["decompressed_file"] == "hamlet.txt"
    restored = client.get(result["download_url"])
    assert restored.data.decode("utf-8") == TEXT


def test_upload_named_like_an_output_file(client):
    body = upload(client, "/compress_file", TEXT.encode("utf-8"), "compressed.txt").get_json()
    assert body["original_size"] == len(TEXT.encode("utf-8"))


def test_compress_rejects_missing_or_wrong_file(client):
    assert client.post("/compress_file", data={}).status_code == 400
    assert upload(client, "/compress_file", b"%PDF", "report.pdf").status_code == 400


def test_compress_rejects_non_utf8(client):
    response = upload(client, "/compress_file", b"\xff\xfe\xfa", "binary.txt")
    assert response.status_code == 400


def test_decompress_rejects_bad_archives(client):
    assert upload(client, "/decompress_file", b"whatever", "notes.txt").status_code == 400
    assert upload(client, "/decompress_file", b"not a pickle", "notes.txt.huff").status_code == 400


def test_download_missing_file(client):
    assert client.get("/download/nojob/compressed.txt").status_code == 404


def test_decompress_rejects_archive_with_unencodable_token(client):
    archive = pickle.dumps((b"\x00", {"\ud800": "0"}, 1))
    assert upload(client, "/decompress_file", archive, "odd.txt.huff").status_code == 400


def test_decompress_rejects_archive_that_does_not_decode(client):
    archive = pickle.dumps((b"\xc0", {"a": "0", "b": "10"}, 2))
    assert upload(client, "/decompress_file", archive, "broken.txt.huff").status_code == 400
