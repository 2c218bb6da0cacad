"""Тесты API эндпоинтов /labels."""

from pricetag.config import LABEL

SOAP = {"name": "soap", "variation": "lavender", "label_size": "38x25", "label_count": 3}


class TestPreviewEndpoint:
    def test_preview(self, client):
        """POST /api/v1/labels/preview возвращает копии с одним баркодом"""
        response = client.post("/api/v1/labels/preview", json=SOAP)

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 3
        assert len({label["barcode_value"] for label in data["labels"]}) == 1
        assert len(data["barcode_value"]) == 8
        assert data["page_css"] == "@page{ size: 38mm 25mm; margin:0 }"
        assert data["page_size"] == "38x25"
        assert data["language"] == "english"
        assert data["captions"]["exp"] == "EXP"

    def test_preview_stable(self, client):
        first = client.post("/api/v1/labels/preview", json=SOAP).json()
        second = client.post("/api/v1/labels/preview", json=SOAP).json()

        assert first["barcode_value"] == second["barcode_value"]

    def test_garbage_input_is_normalized(self, client):
        """Мусор во вводе не даёт 422"""
        response = client.post(
            "/api/v1/labels/preview",
            json={"qty": "abc", "label_count": "-4", "price": "free", "pack_date": "31/02/2025"},
        )

        assert response.status_code == 200
        assert response.json()["count"] == 1

    def test_extreme_numbers_are_normalized(self, client):
        """Тысячи цифр и Infinity в числах -> 200, а не 500"""
        response = client.post("/api/v1/labels/preview", json={"qty": "9" * 5000})
        assert response.status_code == 200

        response = client.post(
            "/api/v1/labels/preview",
            content=b'{"name": "soap", "label_count": Infinity}',
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 200
        assert response.json()["count"] == 1

    def test_label_count_capped(self, client, monkeypatch):
        monkeypatch.setattr(LABEL, "MAX_LABEL_COUNT", 5)

        response = client.post(
            "/api/v1/labels/preview", json={"name": "soap", "label_count": "1000000000"}
        )

        assert response.status_code == 200
        assert response.json()["count"] == 5

    def test_bengali(self, client):
        response = client.post("/api/v1/labels/preview", json={"name": "সাবান", "qty": "৫"})
        data = response.json()

        assert data["language"] == "bengali"
        assert data["captions"]["qty"] == "পরিমাণ"

    def test_remembers_size(self, client):
        client.post("/api/v1/labels/preview", json={**SOAP, "label_size": "50x30"})
        assert client.get("/api/v1/settings").json()["label_size"] == "50x30"


class TestImageEndpoint:
    def test_png(self, client):
        response = client.post("/api/v1/labels/image?index=1", json=SOAP)

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.content.startswith(b"\x89PNG")

    def test_index_out_of_range(self, client):
        response = client.post("/api/v1/labels/image?index=5", json=SOAP)

        assert response.status_code == 404
        assert "5" in response.json()["detail"]["message"]


class TestPrintEndpoint:
    def test_pdf(self, client):
        response = client.post("/api/v1/labels/print", json=SOAP)

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["x-page-size"] == "38x25mm"
        assert response.headers["x-page-count"] == "3"
        assert response.headers["x-next-barcode"] == ""
        assert response.content.startswith(b"%PDF")

    def test_sequential_next_barcode(self, client):
        client.patch("/api/v1/settings", json={"barcode": {"mode": "sequential"}})

        response = client.post("/api/v1/labels/print", json={**SOAP, "barcode_value": "0042"})

        assert response.headers["x-next-barcode"] == "0045"


class TestUnitOptions:
    def test_english(self, client):
        data = client.get("/api/v1/labels/unit-options", params={"qty": "5"}).json()

        assert data["options"][0] == {"value": "গ্রাম", "text": "Gram"}
        assert data["options"][-1]["value"] == "custom"
        assert data["selected"] == "গ্রাম"

    def test_bengali_keeps_selection(self, client):
        data = client.get(
            "/api/v1/labels/unit-options", params={"qty": "৫", "current": "লিটার"}
        ).json()

        assert data["options"][3]["text"] == "লিটার"
        assert data["selected"] == "লিটার"


def test_health(client):
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "storage": "MemoryJSONStore"}
