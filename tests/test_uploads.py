import asyncio
from io import BytesIO
from pathlib import Path

from PIL import Image

from cozy_corner.config import settings
from cozy_corner.utils import file_storage
from cozy_corner.utils.file_storage import resize_image


def png_bytes(size=(1600, 900), mode="RGBA"):
    buffer = BytesIO()
    Image.new(mode, size, (200, 120, 40, 128) if mode == "RGBA" else (200, 120, 40)).save(
        buffer, format="PNG")
    return buffer.getvalue()


def test_single_upload_is_resized_to_jpeg(client, db, customer_headers):
    r = client.post(
        "/api/upload/single",
        files={"image": ("photo.png", png_bytes(), "image/png")},
        data={"type": "menu"},
        headers=customer_headers,
    )

    assert r.status_code == 201
    data = r.json()
    assert data["url"].startswith("/uploads/menu/image-")
    assert data["filename"].endswith(".jpg")

    stored = Path(settings.UPLOAD_DIR) / "menu" / data["filename"]
    with Image.open(stored) as image:
        assert image.format == "JPEG"
        assert image.size == (800, 450)

    served = client.get(data["url"])
    assert served.status_code == 200


def test_small_images_are_not_enlarged():
    with Image.open(BytesIO(resize_image(png_bytes((320, 200), mode="RGB")))) as image:
        assert image.size == (320, 200)


def test_rejects_non_image_extension(client, db, customer_headers):
    r = client.post("/api/upload/single",
                    files={"image": ("notes.txt", b"hello", "text/plain")},
                    headers=customer_headers)
    assert r.status_code == 400


def test_rejects_corrupt_image(client, db, customer_headers):
    r = client.post("/api/upload/single",
                    files={"image": ("photo.jpg", b"definitely not a jpeg", "image/jpeg")},
                    headers=customer_headers)
    assert r.status_code == 400


def test_rejects_oversized_file(client, db, customer_headers, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 1024)
    r = client.post("/api/upload/single",
                    files={"image": ("photo.png", png_bytes(), "image/png")},
                    headers=customer_headers)
    assert r.status_code == 400


def test_rejects_bad_type_directory(client, db, customer_headers):
    r = client.post("/api/upload/single",
                    files={"image": ("photo.png", png_bytes(), "image/png")},
                    data={"type": "../etc"},
                    headers=customer_headers)
    assert r.status_code == 400


def test_upload_requires_auth(client, db):
    r = client.post("/api/upload/single", files={"image": ("photo.png", png_bytes(), "image/png")})
    assert r.status_code == 401


def test_multiple_upload_and_listing(client, db, customer_headers):
    files = [("images", (f"p{i}.png", png_bytes((40, 40)), "image/png")) for i in range(2)]

    r = client.post("/api/upload/multiple", files=files, data={"type": "reviews"},
                    headers=customer_headers)

    assert r.status_code == 201
    uploaded = {f["filename"] for f in r.json()["files"]}
    assert len(uploaded) == 2

    listing = client.get("/api/upload/list/reviews", headers=customer_headers).json()["files"]
    assert uploaded <= {f["filename"] for f in listing}


def test_multiple_upload_limit(client, db, customer_headers):
    files = [("images", (f"p{i}.png", png_bytes((10, 10)), "image/png"))
             for i in range(settings.MAX_FILES_PER_UPLOAD + 1)]
    r = client.post("/api/upload/multiple", files=files, headers=customer_headers)
    assert r.status_code == 400


def test_admin_deletes_upload(client, db, customer_headers, admin_headers):
    uploaded = client.post("/api/upload/single",
                           files={"image": ("photo.png", png_bytes((50, 50)), "image/png")},
                           data={"type": "gallery"},
                           headers=customer_headers).json()

    forbidden = client.delete(f"/api/upload/gallery/{uploaded['filename']}",
                              headers=customer_headers)
    deleted = client.delete(f"/api/upload/gallery/{uploaded['filename']}", headers=admin_headers)
    missing = client.delete(f"/api/upload/gallery/{uploaded['filename']}", headers=admin_headers)

    assert forbidden.status_code == 403
    assert deleted.status_code == 200
    assert missing.status_code == 404
    assert not (Path(settings.UPLOAD_DIR) / "gallery" / uploaded["filename"]).exists()


def test_oversized_file_in_batch_writes_nothing(client, db, customer_headers, monkeypatch):
    small = png_bytes((2, 2), mode="RGB")
    large = png_bytes((400, 400), mode="RGBA")
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", len(small) + 1)
    assert len(large) > settings.MAX_UPLOAD_SIZE

    r = client.post("/api/upload/multiple",
                    files=[("images", ("small.png", small, "image/png")),
                           ("images", ("large.png", large, "image/png"))],
                    data={"type": "batch"},
                    headers=customer_headers)

    assert r.status_code == 400
    batch_dir = Path(settings.UPLOAD_DIR) / "batch"
    assert not batch_dir.exists() or not any(batch_dir.iterdir())


def test_resize_runs_off_the_event_loop(client, db, customer_headers, monkeypatch):
    threads = []
    original = file_storage.resize_image

    def resize_image(content):
        try:
            asyncio.get_running_loop()
            threads.append("event loop")
        except RuntimeError:
            threads.append("worker")
        return original(content)

    monkeypatch.setattr(file_storage, "resize_image", resize_image)

    r = client.post("/api/upload/single",
                    files={"image": ("photo.png", png_bytes((30, 30)), "image/png")},
                    headers=customer_headers)

    assert r.status_code == 201
    assert threads == ["worker"]
