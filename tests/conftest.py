import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from admin_console.config import Settings
from admin_console.main import create_app

API = "/api/admin"
IMAGE_BASE = "http://images.test"


@pytest.fixture
def media_root(tmp_path):
    root = tmp_path / "productImages"
    root.mkdir()
    return root


@pytest.fixture
def settings(media_root):
    return Settings(
        DATABASE_URL="sqlite://",
        MEDIA_ROOT=str(media_root),
        PUBLIC_BASE_URL=IMAGE_BASE,
        CORS_ORIGINS="http://localhost:5173",
    )


@pytest.fixture
def media_config(settings):
    return settings.media()


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as client:
        yield client


@pytest.fixture
def category_id(client):
    response = client.post(f"{API}/categories", json={"name": "Shoes", "description": "Footwear"})
    assert response.status_code == 201
    return response.json()["id"]


def image_bytes(image_format="PNG", size=(4, 4)):
    buffer = io.BytesIO()
    Image.new("RGB", size, (200, 30, 30)).save(buffer, format=image_format)
    return buffer.getvalue()


FORMATS = {".png": "PNG", ".jpg": "JPEG", ".jpeg": "JPEG", ".gif": "GIF"}


def image(field, name="photo.png", content_type="image/png", data=None):
    if data is None:
        data = image_bytes(FORMATS.get(name[name.rfind("."):].lower(), "PNG"))
    return (field, (name, data, content_type))


def stored_files(media_root):
    return sorted(p.name for p in media_root.iterdir())
