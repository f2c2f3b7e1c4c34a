import base64

import pytest

from listing_hub.core.errors import MediaUploadFailedError, ValidationError
from listing_hub.services.media_ingest import MediaIngestor, image_ceiling

PNG_B64 = base64.b64encode(b"\x89PNG\r\n\x1a\nfake-image").decode()


def _stored_files(store):
    return [p for p in store.base.rglob("*") if p.is_file()]


def test_ceilings_depend_on_category():
    assert image_ceiling("sale") == 20
    assert image_ceiling("rent") == 15
    assert image_ceiling("short_term") == 15


def test_references_pass_through_in_order(store):
    refs = ["https://cdn.example.com/1.jpg", {"url": "https://cdn.example.com/2.jpg"}, {"publicUrl": "https://cdn.example.com/3.jpg"}]
    batch = MediaIngestor(store).ingest(refs, category="sale", owner_id="acc_1", is_draft=False)

    assert batch.urls == ["https://cdn.example.com/1.jpg", "https://cdn.example.com/2.jpg", "https://cdn.example.com/3.jpg"]
    assert batch.attempted == 3
    assert batch.uploaded_keys == []


def test_raw_payloads_are_stored(store):
    items = [
        {"name": "front.png", "type": "image/png", "data": PNG_B64},
        {"name": "back", "data": f"data:image/png;base64,{PNG_B64}"},
    ]
    batch = MediaIngestor(store).ingest(items, category="rent", owner_id="acc_1", is_draft=False)

    assert len(batch.urls) == 2
    assert all(u.startswith("https://media.test/acc_1/") for u in batch.urls)
    assert len(_stored_files(store)) == 2


def test_failed_item_discards_earlier_uploads(store):
    items = [
        {"name": "ok.png", "type": "image/png", "data": PNG_B64},
        {"name": "broken.png", "type": "image/png", "data": "not base64!!"},
    ]
    with pytest.raises(MediaUploadFailedError) as exc:
        MediaIngestor(store).ingest(items, category="sale", owner_id="acc_1", is_draft=False)

    assert exc.value.index == 1
    assert exc.value.name == "broken.png"
    assert _stored_files(store) == []


def test_unsupported_content_type(store):
    with pytest.raises(MediaUploadFailedError) as exc:
        MediaIngestor(store).ingest(
            [{"name": "doc.pdf", "type": "application/pdf", "data": PNG_B64}],
            category="sale", owner_id="acc_1", is_draft=False,
        )
    assert exc.value.status_code == 422


def test_invalid_reference(store):
    with pytest.raises(MediaUploadFailedError):
        MediaIngestor(store).ingest(["file:///etc/passwd"], category="sale", owner_id="acc_1", is_draft=False)


def test_too_many_images(store):
    refs = [f"https://cdn.example.com/{i}.jpg" for i in range(16)]
    with pytest.raises(ValidationError) as exc:
        MediaIngestor(store).ingest(refs, category="rent", owner_id="acc_1", is_draft=False)
    assert "images" in exc.value.invalid


def test_zero_images_only_allowed_for_drafts(store):
    ingestor = MediaIngestor(store)
    assert ingestor.ingest([], category="sale", owner_id="acc_1", is_draft=True).urls == []

    with pytest.raises(ValidationError) as exc:
        ingestor.ingest([], category="sale", owner_id="acc_1", is_draft=False)
    assert exc.value.missing == ["images"]


def test_reference_longer_than_its_column_is_refused(store):
    long_ref = "https://cdn.example.com/" + "a" * 1000 + ".jpg"
    with pytest.raises(MediaUploadFailedError) as exc:
        MediaIngestor(store).ingest(
            ["https://cdn.example.com/ok.jpg", {"url": long_ref}],
            category="sale", owner_id="acc_1", is_draft=False,
        )
    assert exc.value.index == 1
    assert exc.value.details["reason"] == "storage reference too long"


class FlakyStore:
    """Delegates to a real store but blows up on the Nth upload."""

    def __init__(self, inner, fail_on: int):
        self.inner = inner
        self.fail_on = fail_on
        self.calls = 0

    def put_bytes(self, *, key, data, content_type=None):
        self.calls += 1
        if self.calls == self.fail_on:
            raise RuntimeError("storage backend unavailable")
        return self.inner.put_bytes(key=key, data=data, content_type=content_type)

    def delete(self, *, key):
        self.inner.delete(key=key)


def test_unexpected_store_error_becomes_upload_failure(store):
    flaky = FlakyStore(store, fail_on=2)
    items = [
        {"name": "one.png", "type": "image/png", "data": PNG_B64},
        {"name": "two.png", "type": "image/png", "data": PNG_B64},
    ]
    with pytest.raises(MediaUploadFailedError) as exc:
        MediaIngestor(flaky).ingest(items, category="sale", owner_id="acc_1", is_draft=False)

    assert exc.value.index == 1
    assert exc.value.details["reason"] == "storage backend unavailable"
    # the first upload succeeded and was then discarded
    assert flaky.calls == 2
    assert _stored_files(store) == []
