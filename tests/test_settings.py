"""
Unit tests for the running text setting.
"""
from roombook import models


class TestRunningText:

    def test_unset_text_is_empty(self, client):
        response = client.get("/api/settings/running-text")
        assert response.status_code == 200
        assert response.json() == {"text": ""}

    def test_set_and_get(self, client):
        response = client.post("/api/settings/running-text", json={"text": "Rapat umum jam 3"})
        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert client.get("/api/settings/running-text").json() == {"text": "Rapat umum jam 3"}

    def test_set_replaces_existing(self, client, db_session):
        db_session.add(models.Setting(key=models.RUNNING_TEXT_KEY, value="old"))
        db_session.commit()
        client.post("/api/settings/running-text", json={"text": "new"})
        assert client.get("/api/settings/running-text").json() == {"text": "new"}
        assert db_session.query(models.Setting).count() == 1

    def test_text_required(self, client):
        response = client.post("/api/settings/running-text", json={})
        assert response.status_code == 400
