# selftest.py
import tempfile
from pathlib import Path

from app import create_app
from tracker.config import Settings


def make_client(workdir):
    """Helper: Flask test client over a throwaway data file."""
    workdir = Path(workdir)
    settings = Settings(
        host="127.0.0.1",
        port=0,
        debug=False,
        data_file=workdir / "data.json",
        static_dir=workdir / "frontend",
        log_level="WARNING",
        log_file=None,
    )
    return create_app(settings).test_client()


def post(client, url, body, expected_status=201):
    resp = client.post(url, json=body)
    assert resp.status_code == expected_status, f"POST {url}: expected {expected_status}, got {resp.status_code} {resp.get_json()}"
    return resp.get_json()


def check_example_scenario(client):
    # Launch -> Design -> Wireframes, all starting from an empty store
    programme = post(client, "/api/programmes", {"name": "Launch"})
    assert programme == {"id": 1, "name": "Launch", "modules": []}, f"Programme: got {programme}"

    module = post(client, "/api/programmes/1/modules", {"name": "Design"})
    assert module == {"id": 1, "name": "Design", "tasks": []}, f"Module: got {module}"

    task = post(client, "/api/modules/1/tasks", {"name": "Wireframes", "start": "2024-01-01", "end": "2024-01-10"})
    assert task == {"id": 1, "name": "Wireframes", "start": "2024-01-01", "end": "2024-01-10"}, f"Task: got {task}"

    fetched = client.get("/api/modules/1").get_json()
    assert fetched["programmeId"] == 1, f"Module owner: got {fetched.get('programmeId')}"
    assert fetched["tasks"] == [task], f"Module tasks: got {fetched['tasks']}"


def check_rejections(client):
    before = client.get("/api/data").get_json()

    err = post(client, "/api/programmes", {"name": ""}, expected_status=400)
    assert err == {"error": "Name is required"}, f"Empty name: got {err}"

    missing = client.get("/api/programmes/999")
    assert missing.status_code == 404, f"Unknown programme: got {missing.status_code}"
    assert "error" in missing.get_json(), "Unknown programme: missing 'error' field"

    after = client.get("/api/data").get_json()
    assert after == before, "Rejected requests must not change persisted state"


if __name__ == "__main__":
    with tempfile.TemporaryDirectory() as tmp:
        client = make_client(tmp)
        check_example_scenario(client)
        check_rejections(client)
    print("✅ Tracker self-test passed: example scenario + rejections")
